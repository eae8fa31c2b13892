"""Citation Extractor: Textual TUI application.

Launch with:  python -m automation.citation_extractor
"""

from __future__ import annotations

from typing import Any

import httpx
from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Input, Label, Static

from .classifier import classify, describe_kind
from .config import Settings
from .errors import CitationError
from .extractor import EMPTY_INPUT_MESSAGE, CitationSession, SessionState
from .formatter import NO_DATE
from .models import CitationStyle

_LIVE_DETECTION_MIN_CHARS = 3


# ── Metadata Card ────────────────────────────────────────────


class MetadataCard(Static):
    """A single labelled value in the result summary."""

    def __init__(self, title: str, value: str = "—", **kw: Any) -> None:
        super().__init__(**kw)
        self._title = title
        self._value = value

    def compose(self) -> ComposeResult:
        yield Label(self._title, classes="card-title")
        yield Label(self._value, classes="card-value")

    def update_value(self, value: str) -> None:
        self._value = value
        self.query_one(".card-value", Label).update(Text(value))


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + ("…" if len(text) > limit else "")


def _style_button_id(style: CitationStyle) -> str:
    return f"style-{style.value.lower()}"


# ── Main App ─────────────────────────────────────────────────


class CitationApp(App[None]):
    """Turn a URL, DOI, ISBN or YouTube link into a formatted citation."""

    TITLE = "Citation Extractor"
    SUB_TITLE = "Enter a URL, DOI, ISBN, or YouTube link"

    CSS = """
    #extractor {
        height: 1fr;
        padding: 1 2;
    }

    #input-row {
        height: 3;
    }

    #citation-input {
        width: 1fr;
    }

    #btn-extract {
        min-width: 20;
    }

    #detected-label {
        color: $text-muted;
        height: 1;
    }

    #error-label {
        color: $error;
        height: auto;
    }

    #metadata-bar {
        height: 5;
        margin-top: 1;
    }

    MetadataCard {
        width: 1fr;
        height: 5;
        border: solid $primary;
        padding: 0 1;
    }

    .card-title {
        text-style: bold;
        color: $text-muted;
    }

    #style-bar {
        height: 3;
        margin-top: 1;
    }

    .style-btn {
        min-width: 10;
    }

    .style-btn.-selected {
        text-style: bold reverse;
    }

    #citation-output {
        height: auto;
        min-height: 5;
        border: thick $primary;
        padding: 1 2;
        margin-top: 1;
    }

    #button-bar {
        dock: bottom;
        height: 3;
        margin-bottom: 1;
        padding: 0 1;
    }

    #button-bar Button {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("f2", "copy", "Copy"),
        Binding("f3", "share", "Share"),
        Binding("f4", "save", "Save"),
        Binding("f5", "reset", "Reset"),
        Binding("f6", "next_style", "Next Style"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        **kw: Any,
    ) -> None:
        super().__init__(**kw)
        self.settings = settings or Settings()
        self._owns_client = client is None
        self._client = client or self.settings.client()
        self.session = CitationSession(self._client, style=self.settings.default_style)

    # ── compose ──────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="extractor"):
            with Horizontal(id="input-row"):
                yield Input(
                    placeholder="https://... or 10.1000/xyz or 978-0-123456-78-9",
                    id="citation-input",
                )
                yield Button("Extract Citation", id="btn-extract", variant="primary")
            yield Label("", id="detected-label")
            yield Label("", id="error-label")
            with Horizontal(id="metadata-bar"):
                yield MetadataCard("Title", id="card-title")
                yield MetadataCard("Author", id="card-author")
                yield MetadataCard("Year", id="card-year")
                yield MetadataCard("Source", id="card-source")
            with Horizontal(id="style-bar"):
                for style in CitationStyle:
                    yield Button(style.value, id=_style_button_id(style), classes="style-btn")
            yield Static("", id="citation-output")
        with Horizontal(id="button-bar"):
            yield Button("Copy", id="btn-copy")
            yield Button("Share", id="btn-share")
            yield Button("Save", id="btn-save")
            yield Button("Reset", id="btn-reset")
            yield Button("Quit", id="btn-quit", variant="error")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#citation-input", Input).focus()
        self._render_session()

    async def on_unmount(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── rendering ────────────────────────────────────────────

    def _render_session(self) -> None:
        s = self.session
        done = s.state is SessionState.DONE
        busy = s.state in (
            SessionState.CLASSIFYING, SessionState.EXTRACTING, SessionState.FORMATTING,
        )

        self.query_one("#btn-extract", Button).disabled = busy
        for btn_id in ("#btn-copy", "#btn-share", "#btn-save"):
            self.query_one(btn_id, Button).disabled = not done
        for style in CitationStyle:
            btn = self.query_one(f"#{_style_button_id(style)}", Button)
            btn.set_class(style is s.style, "-selected")

        self.query_one("#error-label", Label).update(
            Text(f"⚠ {s.error}") if s.state is SessionState.FAILED and s.error else ""
        )

        meta = s.metadata if done else None
        self.query_one("#card-title", MetadataCard).update_value(
            _truncate(meta.title, 60) if meta else "—"
        )
        self.query_one("#card-author", MetadataCard).update_value(
            _truncate(meta.author, 40) if meta else "—"
        )
        self.query_one("#card-year", MetadataCard).update_value(
            (meta.year or NO_DATE) if meta else "—"
        )
        self.query_one("#card-source", MetadataCard).update_value(
            _truncate(meta.source, 40) if meta else "—"
        )

        output = self.query_one("#citation-output", Static)
        if busy:
            output.update("Extracting…")
        elif done:
            output.update(
                Text.assemble((f"{s.style.value} Citation", "bold"), "\n\n", s.citation)
            )
        else:
            output.update("")

        if done and s.detected:
            icon, label = describe_kind(s.detected.kind)
            self.query_one("#detected-label", Label).update(
                f"✅ Citation extracted!  {icon} {label}"
            )

    # ── input handling ───────────────────────────────────────

    @on(Input.Changed, "#citation-input")
    def _on_input_changed(self, event: Input.Changed) -> None:
        label = self.query_one("#detected-label", Label)
        text = event.value.strip()
        if len(text) > _LIVE_DETECTION_MIN_CHARS:
            icon, name = describe_kind(classify(text).kind)
            label.update(f"{icon} {name}")
        else:
            label.update("")

    @on(Input.Submitted, "#citation-input")
    def _on_input_submitted(self) -> None:
        self.action_extract()

    def action_extract(self) -> None:
        raw = self.query_one("#citation-input", Input).value
        if not raw.strip():
            self.notify(EMPTY_INPUT_MESSAGE, severity="error")
            return
        self._run_extract(raw)

    @work(exclusive=True)
    async def _run_extract(self, raw: str) -> None:
        self.query_one("#btn-extract", Button).disabled = True
        self.query_one("#citation-output", Static).update("Extracting…")
        try:
            await self.session.extract(raw)
        finally:
            self._render_session()

    # ── actions ──────────────────────────────────────────────

    def action_next_style(self) -> None:
        styles = list(CitationStyle)
        current = styles.index(self.session.style)
        self.session.select_style(styles[(current + 1) % len(styles)])
        self._render_session()

    def action_copy(self) -> None:
        try:
            self.session.copy()
        except CitationError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify("Citation copied to clipboard")

    def action_share(self) -> None:
        try:
            path = self.session.share(self.settings.export_dir)
        except (CitationError, OSError) as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Citation written to {path}")

    def action_save(self) -> None:
        try:
            saved = self.session.save(self.settings.library_path)
        except (CitationError, OSError) as exc:
            self.notify(str(exc), severity="error")
            return
        if saved is None:
            self.notify("Already in your library", severity="warning")
        else:
            self.notify(f"Saved to {self.settings.library_path}")

    def action_reset(self) -> None:
        self.session.reset()
        self.query_one("#citation-input", Input).value = ""
        self.query_one("#detected-label", Label).update("")
        self._render_session()

    def action_quit(self) -> None:
        self.exit()

    # ── button handlers ──────────────────────────────────────

    @on(Button.Pressed, "#btn-extract")
    def _btn_extract(self) -> None:
        self.action_extract()

    @on(Button.Pressed, ".style-btn")
    def _btn_style(self, event: Button.Pressed) -> None:
        btn_id = event.button.id or ""
        self.session.select_style(btn_id.removeprefix("style-"))
        self._render_session()

    @on(Button.Pressed, "#btn-copy")
    def _btn_copy(self) -> None:
        self.action_copy()

    @on(Button.Pressed, "#btn-share")
    def _btn_share(self) -> None:
        self.action_share()

    @on(Button.Pressed, "#btn-save")
    def _btn_save(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#btn-reset")
    def _btn_reset(self) -> None:
        self.action_reset()

    @on(Button.Pressed, "#btn-quit")
    def _btn_quit(self) -> None:
        self.action_quit()
