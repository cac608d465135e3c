"""Conversation reconstruction from backend document history."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from genstudio.errors import ContentError
from genstudio.types import ConversationTurn, DocumentRecord

FEEDBACK_REGENERATION = "feedback_regeneration"
INITIAL_GENERATION = "initial_generation"
BOOTSTRAP_TURN_ID = "current"
TRANSCRIPT_RULE = "=" * 80

_TYPE_LABELS = {
    INITIAL_GENERATION: "Initial",
    FEEDBACK_REGENERATION: "Feedback",
}


def coerce_records(raw: Iterable[DocumentRecord | Mapping[str, Any]] | None) -> list[DocumentRecord]:
    """Accept parsed records or raw backend mappings.

    Raises ``ContentError`` when the history is not a list of records.
    """
    if not raw:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ContentError("documentHistory is not a list")
    records: list[DocumentRecord] = []
    for item in raw:
        if isinstance(item, DocumentRecord):
            records.append(item)
        elif isinstance(item, Mapping):
            records.append(DocumentRecord.from_record(item))
        else:
            raise ContentError("documentHistory contains a malformed record")
    return records


def normalize_history(
    records: Sequence[DocumentRecord],
    current_content: str | None = None,
    *,
    current_created_at: str = "",
) -> list[ConversationTurn]:
    """Rebuild the ordered turn list from history records.

    Feedback regenerations that carry the user's request produce a user turn
    right before their assistant turn. With no records, existing content
    becomes one synthetic assistant turn.
    """

    if not records:
        if current_content:
            return [_assistant_turn(BOOTSTRAP_TURN_ID, current_content, current_created_at)]
        return []

    turns: list[ConversationTurn] = []
    for index, record in enumerate(records):
        key = record.id or str(index)
        if record.generation_type == FEEDBACK_REGENERATION and record.user_request:
            turns.append(
                ConversationTurn(
                    id=f"{key}-user",
                    type="user",
                    content=record.user_request,
                    created_at=record.created_at,
                )
            )
        turns.append(_assistant_turn(f"{key}-assistant", record.output_content, record.created_at))
    return turns


def _assistant_turn(turn_id: str, content: str, created_at: str) -> ConversationTurn:
    return ConversationTurn(
        id=turn_id,
        type="assistant",
        content=content,
        created_at=created_at,
        word_count=len(content.split()),
        char_count=len(content),
    )


def generation_type_label(generation_type: str | None) -> str:
    return _TYPE_LABELS.get(generation_type or "", "Generated")


def find_active_record(records: Sequence[DocumentRecord], content: str) -> DocumentRecord | None:
    """Return the record whose output matches the content shown right now."""
    target = content.strip()
    for record in records:
        if record.output_content.strip() == target:
            return record
    return None


def render_transcript(records: Sequence[DocumentRecord]) -> str:
    """Render every version as one plain-text document."""
    blocks: list[str] = []
    for index, record in enumerate(records, start=1):
        lines = [
            f"VERSION {index} - {generation_type_label(record.generation_type)}",
            f"Generated: {_format_timestamp(record.created_at)}",
        ]
        if record.user_request:
            lines.append(f"User Request: {record.user_request}")
        lines.extend(["", record.output_content, "", TRANSCRIPT_RULE])
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _format_timestamp(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%b %d, %H:%M")
