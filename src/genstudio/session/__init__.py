"""Generation session components."""

from genstudio.session.controller import RequestSlot, SessionController
from genstudio.session.history import normalize_history, render_transcript
from genstudio.session.patcher import PatchResult, apply_section_patch
from genstudio.session.payload import ChatRequest, InitialRequest, SectionRequest, build_payload
from genstudio.session.templates import TemplateDraft, TemplateField, hydrate, serialize

__all__ = [
    "ChatRequest",
    "InitialRequest",
    "PatchResult",
    "RequestSlot",
    "SectionRequest",
    "SessionController",
    "TemplateDraft",
    "TemplateField",
    "apply_section_patch",
    "build_payload",
    "hydrate",
    "normalize_history",
    "render_transcript",
    "serialize",
]
