import json

import pytest

import cli
from triage.orchestrator import create_report

PAYLOAD = {
    "channel_id": "C42",
    "channel_name": "support",
    "team_domain": "acme",
    "text": "",
    "user_id": "U0",
}

MESSAGES = [
    {"type": "message", "text": ":white_circle: minor typo", "ts": "1700000001.000200", "user": "U1"},
    {"type": "message", "text": ":red_circle: prod down", "ts": "1700000002.000300", "user": "U2"},
    {"type": "message", "text": ":red_circle: deploy bot", "ts": "1700000003.000400", "subtype": "bot_message"},
    {
        "type": "message",
        "text": ":large_blue_circle: flaky test",
        "ts": "1700000004.000500",
        "user": "U3",
        "reactions": [{"name": "white_check_mark", "users": ["U4"], "count": 1}],
    },
]


def test_create_report_default_settings():
    report = create_report(PAYLOAD, MESSAGES)
    assert set(report) == {"text", "unfurl_links", "attachments"}
    lines = report["text"].split("\n")
    assert "https://acme.slack.com/archives/support/p1700000002000300 " in lines[1]
    assert "prod down" not in report["text"]
    assert "1700000003000400" not in report["text"]
    assert "{{" not in report["text"]


def test_create_report_accepts_history_response_and_options():
    options = {"display": ["pending"], "display_user_attributes": ["pending"]}
    report = create_report({**PAYLOAD, "text": "publish"}, {"ok": True, "messages": MESSAGES}, options)
    assert report["response_type"] == "in_channel"
    assert "attachments" not in report
    assert report["text"].split("\n")[1].endswith("p1700000002000300 <@U2>")
    assert "\n\n\n" not in report["text"]


def test_help_report():
    report = create_report({**PAYLOAD, "text": "Help"}, MESSAGES)
    assert list(report) == ["attachments"]


def test_missing_payload_text_is_standard_report():
    payload = {k: v for k, v in PAYLOAD.items() if k != "text"}
    report = create_report(payload, [])
    assert "attachments" in report and "text" in report


def test_message_without_ts_fails_fast():
    with pytest.raises(ValueError, match="index 1"):
        create_report(PAYLOAD, [MESSAGES[0], {"text": ":red_circle:"}])


def test_message_without_text_fails_fast():
    with pytest.raises(ValueError, match="index 0"):
        create_report(PAYLOAD, [{"ts": "1.1"}])


def test_payload_without_channel_fails_fast():
    with pytest.raises(ValueError, match="payload"):
        create_report({"text": "publish"}, MESSAGES)


def test_cli_writes_report(tmp_path, capsys):
    payload_path = tmp_path / "payload.json"
    messages_path = tmp_path / "history.json"
    out_path = tmp_path / "out" / "report.json"
    payload_path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    messages_path.write_text(json.dumps({"messages": MESSAGES}), encoding="utf-8")

    cli.main(["--payload", str(payload_path), "--messages", str(messages_path), "--text", "publish", "--out", str(out_path)])
    report = json.loads(out_path.read_text(encoding="utf-8"))
    assert report["response_type"] == "in_channel"
    assert capsys.readouterr().out == ""

    cli.main(["--payload", str(payload_path), "--messages", str(messages_path)])
    printed = json.loads(capsys.readouterr().out)
    assert "attachments" in printed


def test_malformed_reactions_still_render():
    messages = [
        {"text": ":red_circle: x", "ts": "1.2", "reactions": [{"count": 1}]},
        {"text": ":red_circle: y", "ts": "1.3", "reactions": "oops"},
        {"text": ":red_circle: z", "ts": "1.4", "reactions": [{"name": "eyes", "users": None}]},
    ]
    report = create_report(PAYLOAD, messages)
    sections = report["text"].split("\n\n\n")
    assert sections[0].split("\n")[0].endswith("(2)")
    assert sections[1].split("\n")[0].endswith("(1)")
