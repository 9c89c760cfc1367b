from __future__ import annotations

import re
from typing import Callable, List, Sequence, Tuple

from triage.models import IN_CHANNEL, CommandPayload, Report, TriageRecord, TriageSettings
from triage.utils import get_logger

logger = get_logger(__name__)

SECTION_SEPARATOR = "\n\n\n"


# ---------- Command intent ----------

def _matches(pattern: str, text: str) -> bool:
    return re.search(pattern, text or "", re.IGNORECASE) is not None


def is_help(settings: TriageSettings, text: str) -> bool:
    return _matches(settings.help_text, text)


def is_publish(settings: TriageSettings, text: str) -> bool:
    return _matches(settings.publish_text, text)


# ---------- Links ----------

def archive_base_url(payload: CommandPayload) -> str:
    return f"https://{payload.team_domain}.slack.com/archives/{payload.channel_name}/p"


def channel_reference(payload: CommandPayload) -> str:
    return f"<#{payload.channel_id}|{payload.channel_name}>"


# ---------- Attribution ----------

def _mention_author(settings: TriageSettings, record: TriageRecord) -> str:
    user = record.message.user
    return f"<@{user}>" if user else ""


def _mention_reviewer(settings: TriageSettings, record: TriageRecord) -> str:
    review_emojis = settings.emojis.review
    for reaction in record.message.reactions:
        if reaction.name in review_emojis:
            if not reaction.users:
                return ""
            return f"(:{review_emojis[0]}: <@{reaction.users[0]}>)"
    return ""


AttributionRule = Tuple[str, Callable[[TriageSettings, TriageRecord], str]]

# Evaluated in order; the first enabled rule whose status holds wins.
ATTRIBUTION_RULES: Sequence[AttributionRule] = (
    ("pending", _mention_author),
    ("addressed", _mention_author),
    ("review", _mention_reviewer),
)


def build_attribution(settings: TriageSettings, record: TriageRecord) -> str:
    for status, render in ATTRIBUTION_RULES:
        if status in settings.display_user_attributes and record.has_status(status):
            return render(settings, record)
    return ""


# ---------- Sections ----------

def build_section(
    settings: TriageSettings,
    records: Sequence[TriageRecord],
    payload: CommandPayload,
    name: str,
) -> str:
    base_url = archive_base_url(payload)
    status = settings.section_status(name)

    members = [r for r in records if r.has_status(status)]
    items = [f":{r.emoji}: {base_url}{r.id} {build_attribution(settings, r)}" for r in members]
    text = "\n".join([settings.sections[name].title] + items)

    text = text.replace("{{count}}", str(len(members)))
    text = text.replace("{{channel}}", channel_reference(payload))
    return text


def build_report(
    payload: CommandPayload,
    records: Sequence[TriageRecord],
    settings: TriageSettings,
) -> Report:
    if is_help(settings, payload.text):
        logger.info("render: help requested channel=%s", payload.channel_name)
        return Report(attachments=list(settings.help_attachments))

    sections: List[str] = [build_section(settings, records, payload, name) for name in settings.display]
    report = Report(text=SECTION_SEPARATOR.join(sections), unfurl_links=settings.unfurl_links)

    if is_publish(settings, payload.text):
        report.response_type = IN_CHANNEL
    else:
        report.attachments = list(settings.list_attachments)

    logger.info(
        "render: sections=%d records=%d published=%s",
        len(sections),
        len(records),
        report.response_type == IN_CHANNEL,
    )
    return report
