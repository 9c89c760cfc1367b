from __future__ import annotations

from typing import Iterable, List

from triage.models import TriageRecord
from triage.utils import get_logger

logger = get_logger(__name__)

REMINDER_MARKER = "reminder"


def keep_record(record: TriageRecord) -> bool:
    """Priority-bearing posts written by people; no bots, no reminders."""
    message = record.message
    if record.emoji is None or record.is_bot or message.bot_id:
        return False
    return not (message.subtype and REMINDER_MARKER in message.subtype)


def select_records(records: Iterable[TriageRecord]) -> List[TriageRecord]:
    records = list(records)
    # sorted() is stable: equal priorities keep history order
    kept = sorted((r for r in records if keep_record(r)), key=lambda r: r.priority)
    logger.info("select: kept=%d from=%d", len(kept), len(records))
    return kept
