from __future__ import annotations

from typing import AbstractSet, Callable, Iterable, List, Optional, Sequence

from triage.models import BOT_MESSAGE_SUBTYPE, RawMessage, TriageRecord, TriageSettings
from triage.utils import get_logger

logger = get_logger(__name__)

NOT_FOUND = -1

Matcher = Callable[[Sequence[str]], bool]


def _text_matcher(text: str) -> Matcher:
    return lambda tier: any(e in text for e in tier)


def _reaction_matcher(names: AbstractSet[str]) -> Matcher:
    return lambda tier: any(e in names for e in tier)


def resolve_emoji(settings: TriageSettings, matches: Matcher) -> Optional[str]:
    """Canonical emoji of the first tier (urgent, high, low) that matches."""
    for tier in settings.emojis.tiers:
        if matches(tier):
            return tier[0]
    return None


def classify_message(settings: TriageSettings, message: RawMessage) -> TriageRecord:
    reactions = message.reaction_names
    emojis = settings.emojis
    priority_list = emojis.priority_list

    emoji = resolve_emoji(settings, _text_matcher(message.text))

    # Any priority reaction wins over the text, even a lower tier
    if any(e in reactions for e in priority_list):
        emoji = resolve_emoji(settings, _reaction_matcher(reactions))

    addressed = any(e in reactions for e in emojis.addressed)
    review = any(e in reactions for e in emojis.review) and not addressed
    pending = emoji is not None and not review and not addressed

    return TriageRecord(
        is_bot=message.subtype == BOT_MESSAGE_SUBTYPE,
        priority=priority_list.index(emoji) if emoji is not None else NOT_FOUND,
        emoji=emoji,
        review=review,
        addressed=addressed,
        pending=pending,
        id=message.ts.replace(".", ""),
        message=message,
    )


def classify_messages(settings: TriageSettings, messages: Iterable[RawMessage]) -> List[TriageRecord]:
    records = [classify_message(settings, m) for m in messages]
    logger.debug(
        "classify: records=%d with_emoji=%d",
        len(records),
        sum(1 for r in records if r.emoji is not None),
    )
    return records
