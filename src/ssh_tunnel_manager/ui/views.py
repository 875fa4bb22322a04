"""Display adapters between tunnel snapshots and widgets."""

from pydantic import BaseModel, ConfigDict
from rich.text import Text

from ..tunnel.models import TunnelSummary
from .theme import Palette

ACTIVE_MARK = "🟢"
INACTIVE_MARK = "🔴"


class TunnelView(BaseModel):
    """Display fields for one tunnel in the sidebar list."""

    model_config = ConfigDict(frozen=True)

    tunnel_id: int
    title: str
    description: str
    status_label: str
    status_color: str
    active: bool

    @classmethod
    def from_summary(cls, summary: TunnelSummary, palette: Palette) -> "TunnelView":
        mark = ACTIVE_MARK if summary.active else INACTIVE_MARK
        return cls(
            tunnel_id=summary.id,
            title=summary.tag or f"tunnel-{summary.id}",
            description=(
                f"{mark} {summary.host}  {summary.local_port} → {summary.remote_port}"
            ),
            status_label=f"{mark} ACTIVE" if summary.active else f"{mark} INACTIVE",
            status_color=palette.success if summary.active else palette.error,
            active=summary.active,
        )

    def render_item(self, palette: Palette, selected: bool = False) -> Text:
        """Two-line list entry, with a marker when selected."""
        color = palette.selected if selected else palette.subtle
        text = Text()
        text.append(f"▶ {self.title}" if selected else f"  {self.title}", style=f"bold {color}")
        text.append("\n")
        text.append(f"  {self.description}", style=color)
        return text


def render_tunnel_detail(
    summary: TunnelSummary | None,
    logs: list[str],
    palette: Palette,
    rule_width: int = 40,
) -> Text:
    """Render the output pane: tunnel header followed by its log lines.

    Log lines are appended as plain text so ssh output is never parsed as
    markup.
    """
    text = Text()
    if summary is None:
        text.append("TUNNEL OUTPUT", style=f"bold {palette.title}")
        text.append("\n\n")
        text.append("No tunnel selected", style=palette.subtle)
        return text

    view = TunnelView.from_summary(summary, palette)
    text.append(f"▶ {view.title}", style=f"bold {palette.success}")
    text.append("\n\n")
    for label, value in (
        ("Host", summary.host),
        ("Local Port", str(summary.local_port)),
        ("Remote Port", str(summary.remote_port)),
    ):
        text.append(f"{label}: ")
        text.append(value, style=f"bold {palette.selected}")
        text.append("\n")
    text.append("Status: ")
    text.append(view.status_label, style=view.status_color)
    if summary.pid is not None:
        text.append(f"  (pid {summary.pid})", style=palette.subtle)
    text.append("\n\n")

    text.append("Logs:", style=palette.highlight)
    text.append("\n")
    text.append("─" * max(rule_width, 1), style=palette.subtle)
    text.append("\n")
    if not logs:
        text.append("No logs yet...", style=palette.subtle)
        return text
    text.append("\n".join(logs), style=palette.subtle)
    return text
