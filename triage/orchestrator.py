import time
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from triage.config import default_settings, load_settings
from triage.models import CommandPayload, RawMessage, TriageSettings
from triage.stages.classifier import classify_messages
from triage.stages.renderer import build_report
from triage.stages.selector import select_records
from triage.utils import get_logger, load_json, write_report

logger = get_logger(__name__)


def parse_payload(payload: Dict[str, Any]) -> CommandPayload:
    try:
        return CommandPayload.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Invalid command payload: {e}") from e


def parse_messages(messages: Any) -> List[RawMessage]:
    """Accept a message list or a history response ({"messages": [...]})."""
    if isinstance(messages, dict):
        messages = messages.get("messages") or []
    parsed: List[RawMessage] = []
    for idx, raw in enumerate(messages):
        try:
            parsed.append(RawMessage.model_validate(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid message at index {idx}: {e}") from e
    return parsed


def create_report(
    payload: Dict[str, Any],
    messages: Any,
    options: Optional[Dict[str, Any]] = None,
    *,
    settings: Optional[TriageSettings] = None,
) -> Dict[str, Any]:
    """Build the triage report for one channel history snapshot.

    ``options`` are merged over the packaged defaults; pass ``settings`` to
    reuse an already-built settings object instead.
    """
    if settings is None:
        settings = load_settings(overrides=options) if options else default_settings()

    cmd = parse_payload(payload)
    history = parse_messages(messages)

    records = select_records(classify_messages(settings, history))
    report = build_report(cmd, records, settings)
    return report.to_payload()


def run_once(
    payload_path: str,
    messages_path: str,
    *,
    settings_path: Optional[str] = None,
    text: Optional[str] = None,
    out_path: Optional[str] = None,
) -> str:
    """Render a report from JSON files; returns the serialized report."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        settings = load_settings(settings_path)
        payload = load_json(payload_path)
        if text is not None:
            payload = {**payload, "text": text}
        messages = load_json(messages_path)

        t0 = time.monotonic()
        report = create_report(payload, messages, settings=settings)
        logger.info("report built took_ms=%d", int((time.monotonic() - t0) * 1000))

        body = write_report(report, out_path)
        if out_path:
            logger.info("report written path=%s", out_path)
        return body

    except Exception as e:
        logger.error("Report generation failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
