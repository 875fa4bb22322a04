"""Modal screens: new-tunnel wizard, confirmations and help."""

from pydantic import ValidationError
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from ..common.logging import get_logger
from ..tunnel.models import TunnelRequest
from ..wizard import MAX_HOST_VISIBLE, TunnelWizard, WizardStep
from .theme import Palette

logger = get_logger(__name__)

MODAL_CSS = """
{name} {{
    align: center middle;
}}
{name} > Container {{
    width: 64;
    height: auto;
    max-height: 90%;
    border: round $tunnel-border;
    background: $tunnel-overlay-bg;
    padding: 1 2;
}}
"""


def _render_choices(
    text: Text, items: list[str], cursor: int, scroll: int, palette: Palette
) -> None:
    end = min(scroll + MAX_HOST_VISIBLE, len(items))
    for i in range(scroll, end):
        if i == cursor:
            text.append(f"  ▶  {items[i]}", style=f"bold {palette.selected}")
        else:
            text.append(f"     {items[i]}")
        if i < end - 1:
            text.append("\n")


def render_wizard(wizard: TunnelWizard, palette: Palette) -> Text:
    """Render the current wizard step as a prompt."""
    text = Text()
    hint_style = palette.subtle
    step = wizard.step

    if step == WizardStep.HOST:
        text.append("Select SSH Host:", style="bold")
        text.append("\n\n")
        if not wizard.hosts:
            text.append("No hosts found in ssh config", style=hint_style)
        _render_choices(text, wizard.hosts, wizard.cursor, wizard.host_scroll, palette)
        _append_error(text, wizard, palette)
        text.append("\n\n")
        if len(wizard.hosts) > MAX_HOST_VISIBLE:
            text.append(
                f"({wizard.cursor + 1}/{len(wizard.hosts)}) ↑/↓ to scroll • "
                "Enter to select • m for manual • Esc to cancel",
                style=hint_style,
            )
        else:
            text.append(
                "↑/↓ to move • Enter to select • m for manual • Esc to cancel",
                style=hint_style,
            )

    elif step == WizardStep.HOST_IP:
        text.append(f"Select IP for {wizard.selected_host_entry}:", style="bold")
        text.append("\n\n")
        _render_choices(
            text, wizard.host_ips, wizard.host_ip_index, wizard.host_ip_scroll, palette
        )
        _append_error(text, wizard, palette)
        text.append("\n\n")
        text.append("↑/↓ to move • Enter to select • Esc to go back", style=hint_style)

    elif step == WizardStep.MANUAL_HOST:
        text.append("Enter SSH host manually:", style="bold")
        text.append(f"\n\nHost: {wizard.input}█")
        _append_error(text, wizard, palette)
        text.append("\n\n")
        text.append("Format: user@host or host • Esc to cancel", style=hint_style)

    elif step == WizardStep.REMOTE_PORT:
        text.append("Host: ")
        text.append(wizard.host, style=f"bold {palette.selected}")
        text.append(f"\n\nRemote port: {wizard.input}█")
        _append_error(text, wizard, palette)
        text.append("\n\n")
        text.append("Enter port number • Esc to cancel", style=hint_style)

    elif step == WizardStep.LOCAL_PORT:
        text.append("Remote port: ")
        text.append(wizard.remote_port, style=f"bold {palette.success}")
        text.append(f"\n\nLocal port: {wizard.input}█")
        _append_error(text, wizard, palette)
        text.append("\n\n")
        text.append("Enter port number • Esc to cancel", style=hint_style)

    elif step == WizardStep.TAG:
        text.append(f"Tag for this tunnel:\n\n{wizard.input}█")
        text.append("\n\n")
        text.append(
            "Enter tag or press Enter for random • Esc to cancel", style=hint_style
        )

    elif step == WizardStep.VERBOSE:
        text.append("Show verbose SSH logs? ")
        text.append("(y/n or just Enter for no)", style=hint_style)

    elif step == WizardStep.CONNECTING:
        text.append("Connecting to tunnel...", style=palette.highlight)
        text.append("\n\n")
        text.append("Please wait...", style=hint_style)
        text.append("\n\n")
        text.append(
            f"Host: {wizard.host}\nPorts: {wizard.local_port} → {wizard.remote_port}",
            style=hint_style,
        )

    return text


def _append_error(text: Text, wizard: TunnelWizard, palette: Palette) -> None:
    if wizard.error:
        text.append("\n\n")
        text.append(f"❌ {wizard.error}", style=f"bold {palette.error}")


class NewTunnelScreen(ModalScreen[TunnelRequest | None]):
    """Drives a ``TunnelWizard`` from key presses."""

    DEFAULT_CSS = MODAL_CSS.format(name="NewTunnelScreen")

    def __init__(self, wizard: TunnelWizard, palette: Palette, connect_delay: float = 0.0):
        super().__init__()
        self.wizard = wizard
        self.ui_palette = palette
        self.connect_delay = connect_delay

    def compose(self) -> ComposeResult:
        with Container():
            yield Static(id="wizard-body")

    def on_mount(self) -> None:
        self._refresh_body()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        if self.wizard.done:
            return

        step = self.wizard.press(event.key, event.character)
        self._refresh_body()
        if step == WizardStep.CANCELLED:
            self.dismiss(None)
        elif step == WizardStep.CONNECTING:
            if self.connect_delay > 0:
                self.set_timer(self.connect_delay, self._finish)
            else:
                self.call_after_refresh(self._finish)

    def _finish(self) -> None:
        try:
            request = self.wizard.request
        except ValidationError as e:
            logger.error("Wizard produced an invalid request", error=str(e))
            self.app.notify(
                "Tunnel parameters were rejected", title="Tunnel not created", severity="error"
            )
            self.dismiss(None)
            return
        self.dismiss(request)

    def _refresh_body(self) -> None:
        self.query_one("#wizard-body", Static).update(
            render_wizard(self.wizard, self.ui_palette)
        )


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question. ``y`` confirms, any other key cancels."""

    DEFAULT_CSS = MODAL_CSS.format(name="ConfirmScreen")

    def __init__(
        self,
        title: str,
        body: Text | str,
        palette: Palette,
        action_label: str = "Yes",
        extra_confirm_keys: tuple[str, ...] = (),
    ):
        super().__init__()
        self.title_text = title
        self.body = body
        self.ui_palette = palette
        self.action_label = action_label
        self.confirm_keys = {"y", "Y", *extra_confirm_keys}

    def compose(self) -> ComposeResult:
        text = Text(justify="center")
        text.append(self.title_text, style=f"bold {self.ui_palette.error}")
        text.append("\n\n")
        text.append(self.body if isinstance(self.body, Text) else Text(self.body))
        text.append("\n\n")
        text.append("Y", style=f"bold {self.ui_palette.success}")
        text.append(f" - {self.action_label}   ", style=self.ui_palette.subtle)
        text.append("Any key", style=f"bold {self.ui_palette.error}")
        text.append(" - Cancel", style=self.ui_palette.subtle)
        with Container():
            yield Static(text)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.dismiss(event.key in self.confirm_keys or event.character in self.confirm_keys)


HELP_SHORTCUTS = (
    ("Tab", "Switch between panels"),
    ("n", "Create new tunnel"),
    ("d", "Delete selected tunnel"),
    ("↑/↓ or j/k", "Navigate tunnel list"),
    ("enter", "Select / Confirm"),
    ("esc", "Cancel / Go back"),
    ("q or ctrl+c", "Quit (with confirmation)"),
    ("?", "Show this help"),
)

HELP_TIPS = (
    "• Click on tunnels to select them",
    "• Use scroll wheel to navigate",
    "• Press 'esc' to close this help",
)


class HelpScreen(ModalScreen[None]):
    """Keyboard shortcut overview."""

    DEFAULT_CSS = MODAL_CSS.format(name="HelpScreen")

    CLOSE_KEYS = frozenset({"escape", "q", "question_mark"})

    def __init__(self, palette: Palette, version: str):
        super().__init__()
        self.ui_palette = palette
        self.version = version

    def compose(self) -> ComposeResult:
        palette = self.ui_palette
        text = Text()
        text.append("Keyboard Shortcuts", style=f"bold {palette.title}")
        text.append("\n\n")
        for key, desc in HELP_SHORTCUTS:
            text.append(f"{key + ':':<15}", style=palette.highlight)
            text.append(desc, style=palette.subtle)
            text.append("\n")
        text.append("\n")
        text.append("Tips", style=f"bold {palette.title}")
        text.append("\n\n")
        for tip in HELP_TIPS:
            text.append(tip, style=palette.subtle)
            text.append("\n")
        text.append(f"\nVersion: {self.version}", style=palette.subtle)
        with Container():
            yield Static(text)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        if event.key in self.CLOSE_KEYS:
            self.dismiss(None)
