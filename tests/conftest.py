from __future__ import annotations

from typing import Any

import pytest

from genstudio.config import Settings
from genstudio.credentials import StaticCredentials
from genstudio.session.controller import SessionController
from genstudio.types import FieldSpec, Framework, FrameworkKind


class FakeBackend:
    """Scripted backend; queued items are returned in order, exceptions are raised."""

    def __init__(
        self,
        *,
        generate: list[Any] | None = None,
        chat: list[Any] | None = None,
        templates: list[Any] | None = None,
    ) -> None:
        self.generate_queue = list(generate or [])
        self.chat_queue = list(chat or [])
        self.template_queue = list(templates or [])
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.observed_phases: list[str] = []
        self.controller: SessionController | None = None

    async def generate(self, kind: FrameworkKind, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self._observe()
        self.calls.append(("generate", framework_id, body))
        return self._next(self.generate_queue)

    async def chat(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self._observe()
        self.calls.append(("chat", framework_id, body))
        return self._next(self.chat_queue)

    async def create_template(self, framework_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create_template", framework_id, body))
        return self._next(self.template_queue)

    async def update_template(self, template_id: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("update_template", template_id, body))
        return self._next(self.template_queue)

    def _observe(self) -> None:
        if self.controller is not None:
            self.observed_phases.append(self.controller.phase.value)

    @staticmethod
    def _next(queue: list[Any]) -> dict[str, Any]:
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def generation_data(content: str, *, document_id: str = "doc-1", history: list[dict] | None = None) -> dict:
    data: dict[str, Any] = {
        "generatedContent": content,
        "savedDocument": {"id": document_id},
        "generationMetadata": {"model": "gpt-4o", "usage": {"total_tokens": 321}},
    }
    if history is not None:
        data["documentHistory"] = history
    return data


@pytest.fixture
def framework() -> Framework:
    return Framework(
        id="fw-1",
        name="NeuroCopy",
        kind=FrameworkKind.COPYWRITING,
        fields=(
            FieldSpec("productName"),
            FieldSpec("targetAudience"),
            FieldSpec("mainBenefit"),
            FieldSpec("painPoint", "textarea"),
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token="test-token")


@pytest.fixture
def make_controller(framework: Framework, settings: Settings):
    def _make(backend: FakeBackend, *, token: str | None = "test-token", fill: bool = True) -> SessionController:
        controller = SessionController(framework, backend, StaticCredentials(token), settings=settings)
        backend.controller = controller
        if fill:
            controller.set_input("productName", "Acme CRM")
            controller.set_input("targetAudience", "small agencies")
            controller.set_input("mainBenefit", "fewer missed follow-ups")
        return controller

    return _make
