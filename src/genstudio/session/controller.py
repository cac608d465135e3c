"""Generation session state machine."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol

from loguru import logger

from genstudio.config import Settings
from genstudio.credentials import CredentialProvider
from genstudio.errors import AuthError, ContentError, StudioError, ValidationError
from genstudio.logging_utils import bind_session
from genstudio.session.history import coerce_records, normalize_history
from genstudio.session.patcher import apply_section_patch
from genstudio.session.payload import (
    ChatRequest,
    InitialRequest,
    SectionRequest,
    SectionTuning,
    build_payload,
)
from genstudio.session.templates import hydrate, serialize, validate_template_name
from genstudio.types import (
    ADDITIONAL_INSTRUCTIONS,
    ConversationTurn,
    DocumentRecord,
    Framework,
    FrameworkKind,
    GenerationOptions,
    GenerationResult,
    Outcome,
    Phase,
    Template,
)

REPEATED_FAILURE_THRESHOLD = 3
SUPERSEDED_MESSAGE = "A newer request replaced this one."
FRAGMENT_NOT_FOUND_WARNING = "The selected text was not found in the current content; nothing was replaced."
_OPTION_TYPES: dict[str, type | tuple[type, ...]] = {
    "tone": str,
    "length": str,
    "audience": str,
    "temperature": (int, float),
    "max_tokens": int,
    "include_business_context": bool,
    "save_document": bool,
}


class GenerationBackend(Protocol):
    async def generate(self, kind: FrameworkKind, framework_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def chat(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def create_template(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]: ...

    async def update_template(self, template_id: str, body: dict[str, Any]) -> dict[str, Any]: ...


class RequestSlot:
    """Single-slot token; acquiring a new token invalidates the previous one."""

    def __init__(self) -> None:
        self._current = 0

    def acquire(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current


class SessionController:
    """Owns one generation session: phase, inputs, options, result and history."""

    def __init__(
        self,
        framework: Framework,
        backend: GenerationBackend,
        credentials: CredentialProvider,
        *,
        settings: Settings | None = None,
        session_id: str | None = None,
    ) -> None:
        self.framework = framework
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._backend = backend
        self._credentials = credentials
        self._settings = settings or Settings()
        self._slot = RequestSlot()
        self._flag_owners: dict[str, int] = {}

        self.phase = Phase.INPUT
        self.inputs: dict[str, Any] = {}
        self.options = GenerationOptions()
        self.result: GenerationResult | None = None
        self.history: list[DocumentRecord] = []
        self.turns: list[ConversationTurn] = []
        self.template: Template | None = None
        self.error: str | None = None
        self.warning: str | None = None
        self.retry_count = 0
        self.is_generating = False
        self.is_chat_regenerating = False
        self.is_regenerating_section = False
        self.reset_inputs()

    @property
    def suggest_alternative(self) -> bool:
        return self.retry_count >= REPEATED_FAILURE_THRESHOLD

    @property
    def content(self) -> str:
        return self.result.content if self.result else ""

    def reset_inputs(self) -> None:
        self.inputs = {name: "" for name in self.framework.field_names}

    def set_input(self, name: str, value: str) -> None:
        self.inputs[name] = value

    def set_option(self, name: str, value: Any) -> None:
        expected = _OPTION_TYPES.get(name)
        if expected is None:
            raise ValidationError(f"Unknown generation option: {name}")
        if (isinstance(value, bool) and expected is not bool) or not isinstance(value, expected):
            raise ValidationError(f"Invalid value for {name}: {value!r}")
        self.options = self.options.with_updates(**{name: value})

    def load_template(self, template: Template) -> None:
        self.inputs, self.options = hydrate(self.framework, template, inputs=self.inputs, options=self.options)
        self.template = template
        logger.info("session.template.loaded template={} fields={}", template.id, len(template.field_names))

    def missing_required_fields(self) -> list[str]:
        required = self.framework.field_names[: self._settings.required_field_count]
        return [name for name in required if not str(self.inputs.get(name) or "").strip()]

    async def generate(self) -> Outcome:
        """Run the initial generation, or regenerate everything from ``editing``."""

        bind_session(self.session_id)
        self.warning = None
        missing = self.missing_required_fields()
        if missing:
            return self._reject(f"Please fill in required fields: {', '.join(missing)}")
        if not self._credentials.get_token():
            return self._reject(AuthError("not signed in").user_message)

        body = build_payload(InitialRequest(self.inputs, self.options), top_p=self._settings.top_p)
        token = self._begin(Phase.GENERATING)
        self._raise_flag("is_generating", token)
        logger.info("session.generate.start framework={} kind={}", self.framework.id, self.framework.kind.value)
        try:
            data = await self._backend.generate(self.framework.kind, self.framework.id, body)
            result = _parse_generation(data)
            history = _parse_history(data)
        except StudioError as exc:
            return self._fail(token, exc)
        finally:
            self._finish(token)
            self._lower_flag("is_generating", token)

        if not self._slot.is_current(token):
            return self._superseded("generate")
        self.result = result
        if history is not None:
            self.history = history
        self._rebuild_turns()
        self._succeed()
        logger.info("session.generate.done document={} words={}", result.document_id, result.word_count)
        return Outcome(True, "Content generated")

    async def regenerate_section(self, old_text: str) -> Outcome:
        """Regenerate one fragment and splice it into the stored content."""

        bind_session(self.session_id)
        self.warning = None
        if self.phase is not Phase.EDITING or self.result is None:
            return Outcome(False, "Generate content before regenerating a section.")
        if not old_text or not old_text.strip():
            return Outcome(False, "Select the text you want to regenerate.")

        request = SectionRequest(self.inputs, fragment=old_text, options=self.options)
        body = build_payload(
            request,
            top_p=self._settings.top_p,
            section=SectionTuning(self._settings.section_temperature, self._settings.section_max_tokens),
        )
        token = self._slot.acquire()
        self._raise_flag("is_regenerating_section", token)
        self.error = None
        logger.info("session.section.start chars={}", len(old_text))
        try:
            data = await self._backend.generate(self.framework.kind, self.framework.id, body)
            fragment = _require_text(data, "generatedContent")
        except StudioError as exc:
            if not self._slot.is_current(token):
                return self._superseded("section")
            self.error = exc.user_message
            self.retry_count += 1
            logger.warning("session.section.error kind={} error={}", type(exc).__name__, exc)
            return Outcome(False, self.error)
        finally:
            self._lower_flag("is_regenerating_section", token)

        if not self._slot.is_current(token) or self.result is None:
            return self._superseded("section")
        patch = apply_section_patch(self.result.content, old_text, fragment)
        if not patch.applied:
            self.warning = FRAGMENT_NOT_FOUND_WARNING
            logger.warning("session.section.not_found chars={}", len(old_text))
            return Outcome(True, "Section regenerated", warning=self.warning)
        self.result = replace(self.result, content=patch.text)
        self._rebuild_turns()
        self.retry_count = 0
        logger.info("session.section.done words={}", self.result.word_count)
        return Outcome(True, "Section regenerated")

    async def send_chat_feedback(self, message: str) -> Outcome:
        """Send free-form feedback; the server's history replaces the local one."""

        bind_session(self.session_id)
        self.warning = None
        if self.result is None or not self.result.content:
            return Outcome(False, "Generate content before sending feedback.")
        if not message or not message.strip():
            return Outcome(False, "Enter a message to send.")

        request = ChatRequest(self.inputs, message=message, document_id=self.result.document_id, options=self.options)
        body = build_payload(request, top_p=self._settings.top_p)
        token = self._begin(Phase.GENERATING)
        self._raise_flag("is_chat_regenerating", token)
        logger.info("session.chat.start document={}", self.result.document_id)
        try:
            data = await self._backend.chat(self.framework.id, body)
            content = _require_text(data, "regeneratedContent")
            metadata = _metadata(data)
            history = _parse_history(data)
        except StudioError as exc:
            return self._fail(token, exc)
        finally:
            self._finish(token)
            self._lower_flag("is_chat_regenerating", token)

        if not self._slot.is_current(token) or self.result is None:
            return self._superseded("chat")
        self.result = replace(
            self.result,
            content=content,
            document_id=_document_id(data) or self.result.document_id,
            model=str(metadata.get("model") or self.result.model),
            tokens_used=_tokens_used(metadata) or self.result.tokens_used,
            created_at=_now(),
        )
        if history is not None:
            self.history = history
        self._rebuild_turns()
        self._succeed()
        logger.info("session.chat.done history={} turns={}", len(self.history), len(self.turns))
        return Outcome(True, "Content updated")

    async def save_as_template(self, name: str, description: str | None = None) -> Outcome:
        """Create a template from the current inputs and selections."""

        bind_session(self.session_id)
        try:
            cleaned = validate_template_name(name, description)
            draft = serialize(self.framework, self.inputs, self.options, prompt=description)
            body = draft.to_body(cleaned, document_ids=self._linked_documents())
            record = await self._backend.create_template(self.framework.id, body)
        except StudioError as exc:
            logger.warning("session.template.save_error error={}", exc)
            return Outcome(False, exc.user_message)

        self.template = Template.from_record(record)
        logger.info("session.template.saved template={} name={}", self.template.id, cleaned)
        return Outcome(True, f"Template '{cleaned}' saved", data={"template": self.template})

    async def update_template(self) -> Outcome:
        """Write the current inputs and selections back to the loaded template."""

        bind_session(self.session_id)
        if self.template is None:
            return Outcome(False, "No template is loaded.")
        prompt = self.inputs.get(ADDITIONAL_INSTRUCTIONS) or self.template.user_given_prompt
        draft = serialize(self.framework, self.inputs, self.options, prompt=str(prompt or ""))
        document_ids = self._linked_documents() or list(self.template.document_ids)
        try:
            record = await self._backend.update_template(
                self.template.id, draft.to_body(self.template.name, document_ids=document_ids)
            )
        except StudioError as exc:
            logger.warning("session.template.update_error template={} error={}", self.template.id, exc)
            return Outcome(False, exc.user_message)

        self.template = Template.from_record(record) if record.get("id") else self.template
        logger.info("session.template.updated template={}", self.template.id)
        return Outcome(True, f"Template '{self.template.name}' updated", data={"template": self.template})

    def _linked_documents(self) -> list[str]:
        if self.result and self.result.document_id:
            return [self.result.document_id]
        return []

    def _rebuild_turns(self) -> None:
        created_at = self.result.created_at if self.result else ""
        turns = normalize_history(self.history, self.content, current_created_at=created_at)
        if self.history and self.content and turns[-1].content != self.content:
            turns.extend(normalize_history([], self.content, current_created_at=created_at))
        self.turns = turns

    def _raise_flag(self, flag: str, token: int) -> None:
        self._flag_owners[flag] = token
        setattr(self, flag, True)

    def _lower_flag(self, flag: str, token: int) -> None:
        # A superseded request leaves the flag to the newer request of its kind.
        if self._flag_owners.get(flag) == token:
            setattr(self, flag, False)

    def _begin(self, phase: Phase) -> int:
        token = self._slot.acquire()
        self.phase = phase
        self.error = None
        return token

    def _finish(self, token: int) -> None:
        # Non-studio exceptions still propagate, but never leave the session stuck.
        if self._slot.is_current(token) and self.phase is Phase.GENERATING:
            self.phase = Phase.INPUT

    def _succeed(self) -> None:
        self.phase = Phase.EDITING
        self.retry_count = 0
        self.error = None

    def _reject(self, message: str) -> Outcome:
        self.error = message
        logger.info("session.validation.rejected message={}", message)
        return Outcome(False, message)

    def _fail(self, token: int, exc: StudioError) -> Outcome:
        if not self._slot.is_current(token):
            return self._superseded("failure")
        self.phase = Phase.INPUT
        self.retry_count += 1
        self.error = exc.user_message
        logger.warning(
            "session.request.error kind={} retryable={} retries={} error={}",
            type(exc).__name__,
            exc.retryable,
            self.retry_count,
            exc,
        )
        return Outcome(False, self.error)

    def _superseded(self, stage: str) -> Outcome:
        logger.info("session.response.stale stage={}", stage)
        return Outcome(False, SUPERSEDED_MESSAGE)


def _parse_generation(data: Mapping[str, Any]) -> GenerationResult:
    metadata = _metadata(data)
    return GenerationResult(
        content=_require_text(data, "generatedContent"),
        document_id=_document_id(data),
        model=str(metadata.get("model") or ""),
        tokens_used=_tokens_used(metadata),
        created_at=_now(),
    )


def _metadata(data: Mapping[str, Any]) -> Mapping[str, Any]:
    metadata = data.get("generationMetadata")
    return metadata if isinstance(metadata, Mapping) else {}


def _parse_history(data: Mapping[str, Any]) -> list[DocumentRecord] | None:
    if "documentHistory" not in data:
        return None
    return coerce_records(data["documentHistory"])


def _require_text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ContentError(f"response is missing {key}")
    return value


def _document_id(data: Mapping[str, Any]) -> str | None:
    saved = data.get("savedDocument")
    if isinstance(saved, Mapping) and saved.get("id"):
        return str(saved["id"])
    if data.get("documentId"):
        return str(data["documentId"])
    return None


def _tokens_used(metadata: Mapping[str, Any]) -> int:
    usage = metadata.get("usage")
    if isinstance(usage, Mapping):
        try:
            return int(usage.get("total_tokens") or 0)
        except (TypeError, ValueError):
            return 0
    return 0


def _now() -> str:
    return datetime.now(UTC).isoformat()
