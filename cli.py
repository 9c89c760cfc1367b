#!/usr/bin/env python3
import argparse
import sys

from triage.orchestrator import run_once


def main(argv=None):
    parser = argparse.ArgumentParser(description="Channel triage report CLI")
    parser.add_argument("--payload", required=True, help="Path to slash command payload JSON")
    parser.add_argument("--messages", required=True, help="Path to channel history JSON (list or history response)")
    parser.add_argument("--settings", help="Path to YAML settings merged over the defaults")
    parser.add_argument("--text", help="Override the command text from the payload")
    parser.add_argument("--out", help="Write report JSON here instead of stdout")
    args = parser.parse_args(argv)

    body = run_once(
        args.payload,
        args.messages,
        settings_path=args.settings,
        text=args.text,
        out_path=args.out,
    )
    if not args.out:
        sys.stdout.write(body + "\n")


if __name__ == "__main__":
    main()
