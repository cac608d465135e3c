"""Core data types shared by the session components."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal

TurnType = Literal["user", "assistant"]

TONES = ("professional", "casual", "persuasive", "educational", "humorous")
LENGTHS = ("short", "medium", "long")
AUDIENCES = ("business", "technical", "general", "marketing")

ADDITIONAL_INSTRUCTIONS = "additionalInstructions"


class FrameworkKind(str, Enum):
    COPYWRITING = "copywriting"
    GROWTH_COPILOT = "growth-copilot"
    BRANDING_LAB = "branding-lab"

    @property
    def collection(self) -> str:
        """URL collection segment used for lookup and generation."""
        return _COLLECTIONS[self]


_COLLECTIONS = {
    FrameworkKind.COPYWRITING: "copywritings",
    FrameworkKind.GROWTH_COPILOT: "growthcopilots",
    FrameworkKind.BRANDING_LAB: "brandinglabs",
}


class Phase(str, Enum):
    INPUT = "input"
    GENERATING = "generating"
    EDITING = "editing"


@dataclass(frozen=True)
class FieldSpec:
    """One declared framework input field."""

    name: str
    type: str = "string"

    @classmethod
    def parse(cls, descriptor: str) -> FieldSpec:
        """Parse a ``name:type`` descriptor; the type defaults to ``string``."""
        name, sep, kind = descriptor.partition(":")
        if not sep or not kind.strip():
            return cls(name=name.strip())
        return cls(name=name.strip(), type=kind.strip())


@dataclass(frozen=True)
class Framework:
    """A content framework selected once per session."""

    id: str
    name: str
    kind: FrameworkKind = FrameworkKind.COPYWRITING
    fields: tuple[FieldSpec, ...] = ()
    dropdown: tuple[str, ...] = ()
    description: str = ""
    system_prompt: str = ""
    user_starting_prompt: str = ""

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @classmethod
    def from_record(cls, record: Mapping[str, Any], *, kind: FrameworkKind = FrameworkKind.COPYWRITING) -> Framework:
        fields = tuple(FieldSpec.parse(str(item)) for item in record.get("input_fields") or ())
        return cls(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            kind=kind,
            fields=tuple(spec for spec in fields if spec.name),
            dropdown=tuple(str(item) for item in record.get("dropdown") or ()),
            description=str(record.get("description") or ""),
            system_prompt=str(record.get("system_prompt") or ""),
            user_starting_prompt=str(record.get("user_starting_prompt") or ""),
        )


@dataclass(frozen=True)
class GenerationOptions:
    """User selections and generation knobs; independent of the framework."""

    tone: str = "professional"
    length: str = "medium"
    audience: str = "business"
    temperature: float = 0.7
    max_tokens: int = 2000
    include_business_context: bool = True
    save_document: bool = True

    def with_updates(self, **changes: Any) -> GenerationOptions:
        return replace(self, **changes)

    def selections(self) -> dict[str, str]:
        return {"tone": self.tone, "length": self.length, "audience": self.audience}

    def validate(self) -> list[str]:
        """Return a description for every selection outside the known values."""
        problems: list[str] = []
        for name, allowed in (("tone", TONES), ("length", LENGTHS), ("audience", AUDIENCES)):
            value = getattr(self, name)
            if value not in allowed:
                problems.append(f"unknown {name} {value!r}")
        return problems


@dataclass(frozen=True)
class ConversationTurn:
    """One message in the reconstructed conversation."""

    id: str
    type: TurnType
    content: str
    created_at: str
    word_count: int | None = None
    char_count: int | None = None


@dataclass(frozen=True)
class DocumentRecord:
    """One backend document history record."""

    id: str
    output_content: str
    created_at: str
    name: str = ""
    user_request: str | None = None
    generation_type: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> DocumentRecord:
        return cls(
            id=str(record.get("id", "")),
            output_content=str(record.get("output_content") or ""),
            created_at=str(record.get("createdAt") or record.get("created_at") or ""),
            name=str(record.get("name") or ""),
            user_request=record.get("user_request") or None,
            generation_type=record.get("generation_type") or None,
        )


@dataclass(frozen=True)
class GenerationResult:
    """The last successful generation."""

    content: str
    document_id: str | None = None
    model: str = ""
    tokens_used: int = 0
    created_at: str = ""

    @property
    def word_count(self) -> int:
        return len(self.content.split())


@dataclass(frozen=True)
class Template:
    """A saved template record as stored by the backend."""

    id: str
    name: str
    field_names: tuple[str, ...] = ()
    field_values: tuple[str, ...] = ()
    selected_options: tuple[str, ...] = ()
    document_ids: tuple[str, ...] = ()
    user_given_prompt: str = ""
    framework_id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Template:
        framework_id = record.get("copywritingId") or record.get("growthcopilotId") or record.get("brandinglabId")
        return cls(
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
            field_names=tuple(str(item) for item in record.get("text_input_queries") or ()),
            field_values=tuple(str(item) for item in record.get("text_input_given") or ()),
            selected_options=tuple(str(item) for item in record.get("drop_down") or ()),
            document_ids=tuple(str(item) for item in record.get("documentIds") or ()),
            user_given_prompt=str(record.get("user_given_prompt") or ""),
            framework_id=str(framework_id) if framework_id else None,
        )


@dataclass(frozen=True)
class Outcome:
    """What the controller reports back to a front end after one action."""

    ok: bool
    message: str = ""
    warning: str = ""
    data: dict[str, Any] = field(default_factory=dict)
