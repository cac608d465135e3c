"""CLI main module for the generation studio."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from genstudio.cli.render import Renderer, create_cli_renderer
from genstudio.client import StudioClient
from genstudio.config import Settings, load_settings
from genstudio.errors import StudioError
from genstudio.logging_utils import configure_logging
from genstudio.session.controller import SessionController
from genstudio.session.history import find_active_record, render_transcript
from genstudio.session.templates import suggested_template_name
from genstudio.types import ADDITIONAL_INSTRUCTIONS, Framework, FrameworkKind, Outcome, Template

app = typer.Typer(
    name="genstudio",
    help="Drive framework-based AI generation sessions from the terminal.",
    add_completion=False,
    rich_markup_mode="rich",
)

STUDIO_HELP = "/regen <text>  /all  /save <name>  /update  /history  /transcript  /quit  (anything else is feedback)"


def build_client(settings: Settings) -> StudioClient:
    return StudioClient.from_settings(settings)


def _parse_field_pairs(values: list[str]) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected name=value, got {item!r}")
        pairs[name.strip()] = value
    return pairs


async def _open_session(
    client: StudioClient,
    settings: Settings,
    *,
    framework_id: str,
    kind: FrameworkKind,
    template_id: Optional[str],
) -> SessionController:
    framework = Framework.from_record(await client.get_framework(kind, framework_id), kind=kind)
    controller = SessionController(framework, client, client.credentials, settings=settings)
    if template_id:
        controller.load_template(Template.from_record(await client.get_template(template_id)))
    return controller


def _apply_cli_inputs(
    controller: SessionController,
    fields: dict[str, str],
    *,
    instructions: Optional[str],
    tone: Optional[str],
    length: Optional[str],
    audience: Optional[str],
) -> None:
    for name, value in fields.items():
        controller.set_input(name, value)
    if instructions is not None:
        controller.set_input(ADDITIONAL_INSTRUCTIONS, instructions)
    for option, value in (("tone", tone), ("length", length), ("audience", audience)):
        if value is not None:
            controller.set_option(option, value)


@app.command()
def generate(
    framework_id: str = typer.Argument(..., help="Framework id"),
    kind: FrameworkKind = typer.Option(FrameworkKind.COPYWRITING, "--kind", "-k", help="Framework kind"),
    field: list[str] = typer.Option([], "--field", "-f", help="Input as name=value; repeatable"),  # noqa: B008
    instructions: Optional[str] = typer.Option(None, "--instructions", "-i", help="Additional instructions"),
    tone: Optional[str] = typer.Option(None, "--tone"),
    length: Optional[str] = typer.Option(None, "--length"),
    audience: Optional[str] = typer.Option(None, "--audience"),
    template_id: Optional[str] = typer.Option(None, "--template", "-t", help="Template to load first"),
) -> None:
    """Run one generation and print the result."""

    settings = load_settings()
    configure_logging(level=settings.log_level)
    pairs = _parse_field_pairs(field)
    renderer = create_cli_renderer()

    async def _run() -> bool:
        async with build_client(settings) as client:
            try:
                controller = await _open_session(
                    client, settings, framework_id=framework_id, kind=kind, template_id=template_id
                )
            except StudioError as exc:
                renderer.error(exc.user_message)
                return False
            _apply_cli_inputs(controller, pairs, instructions=instructions, tone=tone, length=length, audience=audience)
            for problem in controller.options.validate():
                renderer.warning(problem)
            outcome = await controller.generate()
            if not outcome.ok or controller.result is None:
                renderer.error(outcome.message)
                return False
            renderer.result(controller.result)
            return True

    if not asyncio.run(_run()):
        raise typer.Exit(1)


@app.command()
def fields(
    framework_id: str = typer.Argument(..., help="Framework id"),
    kind: FrameworkKind = typer.Option(FrameworkKind.COPYWRITING, "--kind", "-k", help="Framework kind"),
) -> None:
    """List a framework's declared input fields."""

    settings = load_settings()
    configure_logging(level=settings.log_level)
    renderer = create_cli_renderer()

    async def _run() -> Framework | None:
        async with build_client(settings) as client:
            try:
                return Framework.from_record(await client.get_framework(kind, framework_id), kind=kind)
            except StudioError as exc:
                renderer.error(exc.user_message)
                return None

    framework = asyncio.run(_run())
    if framework is None:
        raise typer.Exit(1)
    renderer.fields(framework, settings.required_field_count)


@app.command()
def studio(
    framework_id: str = typer.Argument(..., help="Framework id"),
    kind: FrameworkKind = typer.Option(FrameworkKind.COPYWRITING, "--kind", "-k", help="Framework kind"),
    field: list[str] = typer.Option([], "--field", "-f", help="Input as name=value; repeatable"),  # noqa: B008
    instructions: Optional[str] = typer.Option(None, "--instructions", "-i", help="Additional instructions"),
    template_id: Optional[str] = typer.Option(None, "--template", "-t", help="Template to load first"),
) -> None:
    """Generate, then refine interactively."""

    settings = load_settings()
    configure_logging(profile="interactive", level=settings.log_level)
    pairs = _parse_field_pairs(field)
    renderer = create_cli_renderer()

    async def _run() -> bool:
        async with build_client(settings) as client:
            try:
                controller = await _open_session(
                    client, settings, framework_id=framework_id, kind=kind, template_id=template_id
                )
            except StudioError as exc:
                renderer.error(exc.user_message)
                return False
            _apply_cli_inputs(controller, pairs, instructions=instructions, tone=None, length=None, audience=None)
            renderer.welcome(controller.framework)
            await run_studio(controller, renderer)
            return True

    if not asyncio.run(_run()):
        raise typer.Exit(1)


async def run_studio(controller: SessionController, renderer: Renderer) -> None:
    """Interactive refinement loop over one session."""

    await _report(controller, renderer, await controller.generate())
    renderer.info(f"[dim]{STUDIO_HELP}[/dim]")
    while True:
        raw = renderer.get_user_input().strip()
        if not raw:
            continue
        command, _, argument = raw.partition(" ")
        if command in {"/quit", "/exit"}:
            break
        if command == "/all":
            await _report(controller, renderer, await controller.generate())
        elif command == "/regen":
            await _report(controller, renderer, await controller.regenerate_section(argument))
        elif command == "/save":
            outcome = await controller.save_as_template(argument or suggested_template_name(controller.framework))
            (renderer.info if outcome.ok else renderer.error)(outcome.message)
        elif command == "/update":
            outcome = await controller.update_template()
            (renderer.info if outcome.ok else renderer.error)(outcome.message)
        elif command == "/history":
            renderer.turns(controller.turns)
        elif command == "/transcript":
            active = find_active_record(controller.history, controller.content)
            version = controller.history.index(active) + 1 if active else None
            renderer.transcript(render_transcript(controller.history), version)
        elif command.startswith("/"):
            renderer.error(f"unknown command {command}. {STUDIO_HELP}")
        else:
            await _report(controller, renderer, await controller.send_chat_feedback(raw))


async def _report(controller: SessionController, renderer: Renderer, outcome: Outcome) -> None:
    if not outcome.ok:
        renderer.error(outcome.message)
        if controller.suggest_alternative:
            renderer.info("[dim]Several attempts failed; try adjusting your inputs or options.[/dim]")
        return
    if outcome.warning:
        renderer.warning(outcome.warning)
    if controller.result is not None:
        renderer.result(controller.result)
