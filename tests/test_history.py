import pytest

from genstudio.errors import ContentError
from genstudio.session.history import (
    coerce_records,
    find_active_record,
    normalize_history,
    render_transcript,
)
from genstudio.types import DocumentRecord

RAW_HISTORY = [
    {
        "id": "d1",
        "name": "Draft",
        "output_content": "First draft",
        "createdAt": "2024-05-01T10:30:00Z",
        "generation_type": "initial_generation",
    },
    {
        "id": "d2",
        "output_content": "Shorter draft",
        "createdAt": "2024-05-01T10:35:00Z",
        "user_request": "make it shorter",
        "generation_type": "feedback_regeneration",
    },
    {
        "id": "d3",
        "output_content": "Third draft",
        "createdAt": "2024-05-01T10:40:00Z",
        "generation_type": "feedback_regeneration",
    },
]


def test_feedback_records_emit_user_turn_before_assistant() -> None:
    turns = normalize_history(coerce_records(RAW_HISTORY))

    assert [(turn.type, turn.content) for turn in turns] == [
        ("assistant", "First draft"),
        ("user", "make it shorter"),
        ("assistant", "Shorter draft"),
        ("assistant", "Third draft"),
    ]
    assert turns[0].created_at == "2024-05-01T10:30:00Z"
    assert turns[0].word_count == 2
    assert turns[0].char_count == len("First draft")


def test_normalize_is_deterministic_and_ends_with_assistant() -> None:
    records = coerce_records(RAW_HISTORY)

    first = normalize_history(records)
    second = normalize_history(records)

    assert first == second
    assert first[-1].type == "assistant"
    assert len({turn.id for turn in first}) == len(first)


def test_empty_history_bootstraps_from_current_content() -> None:
    turns = normalize_history([], "Generated copy", current_created_at="2024-05-01T09:00:00Z")

    assert len(turns) == 1
    assert turns[0].type == "assistant"
    assert turns[0].content == "Generated copy"


def test_empty_history_without_content_is_empty() -> None:
    assert normalize_history([]) == []
    assert normalize_history([], "") == []


def test_user_request_ignored_for_non_feedback_records() -> None:
    record = DocumentRecord(id="x", output_content="out", created_at="", user_request="hi")

    turns = normalize_history([record])

    assert [turn.type for turn in turns] == ["assistant"]


def test_render_transcript_lists_every_version() -> None:
    transcript = render_transcript(coerce_records(RAW_HISTORY))

    assert transcript.startswith("VERSION 1 - Initial\nGenerated: May 01, 10:30")
    assert "VERSION 2 - Feedback" in transcript
    assert "User Request: make it shorter" in transcript
    assert transcript.count("=" * 80) == 3


def test_render_transcript_keeps_unparseable_timestamps() -> None:
    record = DocumentRecord(id="x", output_content="out", created_at="yesterday")

    assert "Generated: yesterday" in render_transcript([record])
    assert "VERSION 1 - Generated" in render_transcript([record])


def test_find_active_record_ignores_surrounding_whitespace() -> None:
    records = coerce_records(RAW_HISTORY)

    assert find_active_record(records, "  Shorter draft\n") == records[1]
    assert find_active_record(records, "nope") is None


def test_coerce_records_rejects_malformed_history() -> None:
    with pytest.raises(ContentError):
        coerce_records("not a list")
    with pytest.raises(ContentError):
        coerce_records([{"id": "ok"}, "oops"])
