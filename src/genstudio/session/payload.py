"""Request bodies for the three generation modes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias, assert_never

from genstudio.types import ADDITIONAL_INSTRUCTIONS, GenerationOptions

DEFAULT_TOP_P = 0.9
SECTION_LENGTH = "short"
SECTION_TEMPERATURE_STEP = 0.1
MAX_TEMPERATURE = 2.0


@dataclass(frozen=True)
class InitialRequest:
    """First generation, also used for regenerate-all."""

    inputs: Mapping[str, Any]
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass(frozen=True)
class SectionRequest:
    """Regeneration scoped to one fragment of the current content."""

    inputs: Mapping[str, Any]
    fragment: str
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass(frozen=True)
class ChatRequest:
    """Free-form feedback on the current document."""

    inputs: Mapping[str, Any]
    message: str
    document_id: str | None = None
    options: GenerationOptions = field(default_factory=GenerationOptions)


GenerationRequest: TypeAlias = InitialRequest | SectionRequest | ChatRequest


@dataclass(frozen=True)
class SectionTuning:
    """Overrides applied to section regeneration."""

    temperature: float = 0.8
    max_tokens: int = 500


def build_payload(
    request: GenerationRequest,
    *,
    top_p: float = DEFAULT_TOP_P,
    section: SectionTuning | None = None,
) -> dict[str, Any]:
    """Build the exact request body the backend expects for one request.

    The result is a fresh structure; the request's inputs are copied, never
    mutated.
    """

    match request:
        case InitialRequest(inputs=inputs, options=options):
            return _generation_body(dict(inputs), options, top_p=top_p)
        case SectionRequest(inputs=inputs, fragment=fragment, options=options):
            tuning = section or SectionTuning()
            scoped = options.with_updates(
                length=SECTION_LENGTH,
                temperature=_section_temperature(tuning, options),
                max_tokens=min(tuning.max_tokens, options.max_tokens),
                save_document=False,
            )
            user_inputs = dict(inputs)
            user_inputs["regenerationFocus"] = fragment
            return _generation_body(user_inputs, scoped, top_p=top_p)
        case ChatRequest(inputs=inputs, message=message, document_id=document_id, options=options):
            return {
                "userMessage": message,
                "documentId": document_id,
                "userInputs": dict(inputs),
                "userSelections": options.selections(),
                "businessContext": True,
                "includeHistory": True,
                "generationOptions": _generation_options(options, top_p=top_p),
            }
        case _:
            assert_never(request)


def _section_temperature(tuning: SectionTuning, options: GenerationOptions) -> float:
    """At least the tuned value and always a step above the user's, up to ``MAX_TEMPERATURE``."""
    raised = round(min(options.temperature + SECTION_TEMPERATURE_STEP, MAX_TEMPERATURE), 2)
    return max(tuning.temperature, raised)


def _generation_body(user_inputs: dict[str, Any], options: GenerationOptions, *, top_p: float) -> dict[str, Any]:
    prompt = user_inputs.get(ADDITIONAL_INSTRUCTIONS)
    return {
        "userInputs": user_inputs,
        "userSelections": options.selections(),
        "userPrompt": prompt if prompt is not None else "",
        "businessContext": options.include_business_context,
        "generationOptions": _generation_options(options, top_p=top_p),
    }


def _generation_options(options: GenerationOptions, *, top_p: float) -> dict[str, Any]:
    return {
        "temperature": options.temperature,
        "maxTokens": options.max_tokens,
        "topP": top_p,
        "saveDocument": options.save_document,
    }
