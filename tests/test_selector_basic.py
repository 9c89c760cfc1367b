from triage.config import load_settings
from triage.models import RawMessage
from triage.stages.classifier import classify_messages
from triage.stages.selector import keep_record, select_records

SETTINGS = load_settings(overrides={
    "emojis": {"urgent": ["fire"], "high": ["large_blue_circle"], "low": ["white_circle"]}
})


def _records(*messages):
    raw = [
        RawMessage.model_validate({"ts": f"1700000000.00000{i}", "user": "U1", **m})
        for i, m in enumerate(messages)
    ]
    return classify_messages(SETTINGS, raw)


def test_noise_is_excluded():
    recs = _records(
        {"text": ":fire: from a bot", "subtype": "bot_message"},
        {"text": ":fire: from an app", "bot_id": "B123"},
        {"text": ":fire: remind me", "subtype": "reminder_add"},
        {"text": "no marker"},
        {"text": ":fire: keep me"},
    )
    kept = select_records(recs)
    assert [r.message.text for r in kept] == [":fire: keep me"]
    assert not keep_record(recs[2])


def test_addressed_records_are_still_kept():
    recs = _records({"text": ":white_circle:", "reactions": [{"name": "white_check_mark", "users": ["U2"]}]})
    kept = select_records(recs)
    assert len(kept) == 1 and kept[0].addressed


def test_sort_is_monotonic_and_stable():
    recs = _records(
        {"text": "low one :white_circle:"},
        {"text": "urgent one :fire:"},
        {"text": "high one :large_blue_circle:"},
        {"text": "urgent two :fire:"},
        {"text": "low two :white_circle:"},
    )
    kept = select_records(recs)
    priorities = [r.priority for r in kept]
    assert priorities == sorted(priorities)
    assert [r.message.text.split(" :")[0] for r in kept] == [
        "urgent one",
        "urgent two",
        "high one",
        "low one",
        "low two",
    ]
