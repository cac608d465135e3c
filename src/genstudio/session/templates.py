"""Projection between session state and saved templates."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from genstudio.errors import ValidationError
from genstudio.types import ADDITIONAL_INSTRUCTIONS, Framework, GenerationOptions, Template

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
_SELECTION_SLOTS = ("tone", "length", "audience")


@dataclass(frozen=True)
class TemplateField:
    name: str
    value: str


@dataclass(frozen=True)
class TemplateDraft:
    """Serialized session state, kept as name/value pairs until sent."""

    fields: tuple[TemplateField, ...]
    selected_options: tuple[str, ...]
    user_given_prompt: str = ""

    @property
    def field_names(self) -> list[str]:
        return [item.name for item in self.fields]

    @property
    def field_values(self) -> list[str]:
        return [item.value for item in self.fields]

    def to_body(self, name: str, *, document_ids: list[str] | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": name,
            "user_given_prompt": self.user_given_prompt,
            "text_input_queries": self.field_names,
            "text_input_given": self.field_values,
            "drop_down": list(self.selected_options),
        }
        if document_ids:
            body["documentIds"] = list(document_ids)
        return body


def serialize(
    framework: Framework,
    inputs: Mapping[str, Any],
    options: GenerationOptions,
    *,
    prompt: str | None = None,
) -> TemplateDraft:
    """Walk the framework's fields in declared order and capture their values."""

    fields = tuple(TemplateField(name, _as_text(inputs.get(name))) for name in framework.field_names)
    selected = tuple(value for value in (options.tone, options.length, options.audience) if value)
    if prompt is None:
        prompt = _as_text(inputs.get(ADDITIONAL_INSTRUCTIONS))
    return TemplateDraft(fields=fields, selected_options=selected, user_given_prompt=prompt)


def hydrate(
    framework: Framework,
    template: Template,
    *,
    inputs: Mapping[str, Any] | None = None,
    options: GenerationOptions | None = None,
) -> tuple[dict[str, Any], GenerationOptions]:
    """Load a template back into inputs and options.

    Template fields the framework does not declare are ignored; declared
    fields the template lacks keep their prior value. Only safe when the
    framework's field order matches the one the template was saved with.
    """

    hydrated: dict[str, Any] = {name: "" for name in framework.field_names}
    if inputs:
        hydrated.update(inputs)
    declared = set(framework.field_names)
    for name, value in zip(template.field_names, template.field_values, strict=False):
        if name in declared:
            hydrated[name] = value
    if template.user_given_prompt:
        hydrated[ADDITIONAL_INSTRUCTIONS] = template.user_given_prompt

    base = options or GenerationOptions()
    updates = {
        slot: value for slot, value in zip(_SELECTION_SLOTS, template.selected_options[:3], strict=False) if value
    }
    return hydrated, base.with_updates(**updates)


def validate_template_name(name: str, description: str | None = None) -> str:
    """Return the cleaned name or raise ``ValidationError``."""

    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Template name is required")
    if len(cleaned) < MIN_NAME_LENGTH:
        raise ValidationError(f"Template name must be at least {MIN_NAME_LENGTH} characters")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"Template name must be less than {MAX_NAME_LENGTH} characters")
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters")
    return cleaned


def suggested_template_name(framework: Framework, today: date | None = None) -> str:
    day = today or date.today()
    return f"{framework.name} Template - {day.month}/{day.day}/{day.year}"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
