"""Typed models for settings, platform input and the rendered report.

Platform objects (messages, payloads) keep unknown fields so callers can pass
raw API responses straight through.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Status = Literal["pending", "review", "addressed"]

STATUSES: Tuple[str, ...] = ("pending", "review", "addressed")
BOT_MESSAGE_SUBTYPE = "bot_message"
IN_CHANNEL = "in_channel"


# ---------- Settings ----------

class EmojiSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    urgent: Tuple[str, ...] = Field(min_length=1)
    high: Tuple[str, ...] = Field(min_length=1)
    low: Tuple[str, ...] = Field(min_length=1)
    review: Tuple[str, ...] = Field(min_length=1)
    addressed: Tuple[str, ...] = Field(min_length=1)

    @property
    def tiers(self) -> Tuple[Tuple[str, ...], ...]:
        """Priority tiers in precedence order."""
        return (self.urgent, self.high, self.low)

    @property
    def priority_list(self) -> Tuple[str, ...]:
        return self.urgent + self.high + self.low


class SectionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    status: Optional[Status] = None


class TriageSettings(BaseModel):
    """Immutable settings for one report invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    help_text: str
    publish_text: str
    unfurl_links: bool = False
    emojis: EmojiSettings
    display: Tuple[str, ...]
    display_user_attributes: Tuple[Status, ...] = ()
    sections: Dict[str, SectionSettings]
    help_attachments: Tuple[Dict[str, Any], ...] = Field(default=(), alias="help")
    list_attachments: Tuple[Dict[str, Any], ...] = Field(default=(), alias="list")

    @field_validator("help_text", "publish_text")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"invalid command pattern {value!r}: {e}") from e
        return value

    @model_validator(mode="after")
    def _check_sections(self) -> "TriageSettings":
        for name in self.display:
            if name not in self.sections:
                raise ValueError(f"display names unknown section: {name!r}")
        for name, section in self.sections.items():
            if section.status is None and name not in STATUSES:
                raise ValueError(f"section {name!r} needs an explicit status")
        return self

    def section_status(self, name: str) -> str:
        section = self.sections[name]
        return section.status or name


# ---------- Platform input ----------

def _clean_reaction_list(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, (list, tuple)):
        return []
    out: List[Dict[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            continue
        users = item.get("users")
        cleaned = {
            **item,
            "users": [u for u in users if isinstance(u, str)] if isinstance(users, (list, tuple)) else [],
        }
        count = cleaned.get("count")
        if not isinstance(count, int) or isinstance(count, bool):
            cleaned.pop("count", None)
        out.append(cleaned)
    return out


class Reaction(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    users: Tuple[str, ...] = ()
    count: Optional[int] = None


class RawMessage(BaseModel):
    """A channel history message as returned by the platform."""

    model_config = ConfigDict(extra="allow", frozen=True)

    text: str
    ts: str
    user: Optional[str] = None
    reactions: Tuple[Reaction, ...] = ()
    subtype: Optional[str] = None
    bot_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _clean_reactions(cls, data: Any) -> Any:
        # Malformed reactions count as no reactions; they never fail a message
        if isinstance(data, dict) and "reactions" in data:
            data = {**data, "reactions": _clean_reaction_list(data["reactions"])}
        return data

    @property
    def reaction_names(self) -> frozenset:
        return frozenset(r.name for r in self.reactions)


class CommandPayload(BaseModel):
    """Slash command payload fields the report needs."""

    model_config = ConfigDict(extra="allow", frozen=True)

    channel_id: str
    channel_name: str
    team_domain: str
    text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _null_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("text") is None:
            data = {**data, "text": ""}
        return data


# ---------- Derived ----------

class TriageRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_bot: bool
    priority: int
    emoji: Optional[str]
    review: bool
    addressed: bool
    pending: bool
    id: str
    message: RawMessage

    def has_status(self, status: str) -> bool:
        return bool(getattr(self, status))


class Report(BaseModel):
    """Either the help shape ({attachments}) or the standard shape."""

    text: Optional[str] = None
    unfurl_links: Optional[bool] = None
    response_type: Optional[str] = None
    attachments: Optional[List[Dict[str, Any]]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
