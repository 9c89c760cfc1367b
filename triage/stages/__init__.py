"""Pipeline stages: classification, selection, rendering.

Each stage exposes a small, pure function API over the models in
`triage.models`; settings are passed in explicitly on every call.
"""
