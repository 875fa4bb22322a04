"""Textual application: tunnel list, output pane and modal dialogs."""

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Footer, Header, ListItem, ListView, Static

from .. import __version__
from ..common.exceptions import TunnelNotFoundError, TunnelStartError
from ..common.logging import get_logger
from ..config import AppConfig
from ..hosts import list_hosts
from ..tunnel.models import TunnelRequest, TunnelSummary
from ..tunnel.supervisor import TunnelSupervisor
from ..wizard import TunnelWizard
from .screens import ConfirmScreen, HelpScreen, NewTunnelScreen
from .theme import DEFAULT_PALETTE, Palette
from .views import TunnelView, render_tunnel_detail

logger = get_logger(__name__)

READY_STATUS = "Ready • Press ? for help"


class TunnelsChanged(Message):
    """Posted (from any thread) when a tunnel logged a line or changed state."""

    def __init__(self, tunnel_id: int) -> None:
        super().__init__()
        self.tunnel_id = tunnel_id


class TunnelListItem(ListItem):
    """Sidebar entry bound to one tunnel id."""

    def __init__(self, view: TunnelView, palette: Palette) -> None:
        label = Static(view.render_item(palette))
        super().__init__(label)
        self.tunnel_view = view
        self.ui_palette = palette
        self._label = label

    @property
    def tunnel_id(self) -> int:
        return self.tunnel_view.tunnel_id

    def set_view(self, view: TunnelView, selected: bool) -> None:
        self.tunnel_view = view
        self._label.update(view.render_item(self.ui_palette, selected))


class TunnelManagerApp(App[None]):
    """SSH tunnel manager terminal UI."""

    TITLE = "SSH TUNNEL MANAGER"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    #main {
        height: 1fr;
    }
    #sidebar {
        width: 40;
        border: round $tunnel-border;
        padding: 0 1;
    }
    #sidebar:focus-within {
        border: round $tunnel-accent;
    }
    #output {
        border: round $tunnel-border;
        padding: 0 1;
    }
    #output:focus {
        border: round $tunnel-accent;
    }
    .pane-title {
        color: $tunnel-title;
        text-style: bold;
        padding-bottom: 1;
    }
    #tunnel-list {
        height: 1fr;
        background: transparent;
    }
    TunnelListItem {
        height: auto;
        padding-bottom: 1;
    }
    #empty-hint {
        color: $tunnel-subtle;
    }
    #status-bar {
        height: 1;
        padding: 0 1;
        color: $tunnel-status-fg;
        background: $tunnel-status-bg;
    }
    """

    BINDINGS = [
        Binding("n", "new_tunnel", "New"),
        Binding("d", "delete_tunnel", "Delete"),
        Binding("question_mark", "help", "Help"),
        Binding("q", "request_quit", "Quit"),
        Binding("ctrl+c", "request_quit", "Quit", show=False, priority=True),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(
        self,
        config: AppConfig | None = None,
        palette: Palette = DEFAULT_PALETTE,
        supervisor: TunnelSupervisor | None = None,
    ) -> None:
        self.config = config or AppConfig()
        # Read by get_css_variables() during App.__init__.
        self.ui_palette = palette
        super().__init__()
        self.supervisor = supervisor or TunnelSupervisor(self.config)
        self.supervisor.listener = self._on_supervisor_event
        self.selected_tunnel_id: int | None = None
        self._items: dict[int, TunnelListItem] = {}
        self._quit_pending = False

    def get_css_variables(self) -> dict[str, str]:
        variables = super().get_css_variables()
        variables.update(self.ui_palette.css_variables())
        return variables

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            with Vertical(id="sidebar"):
                yield Static("ACTIVE TUNNELS", classes="pane-title")
                yield Static("No tunnels active\n\nPress 'n' to create one", id="empty-hint")
                yield ListView(id="tunnel-list")
            with VerticalScroll(id="output"):
                yield Static(id="tunnel-output")
        yield Static(READY_STATUS, id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_tunnels()

    def _on_supervisor_event(self, tunnel_id: int) -> None:
        # Runs on capture worker threads; post_message is thread-safe.
        self.post_message(TunnelsChanged(tunnel_id))

    def on_tunnels_changed(self, message: TunnelsChanged) -> None:
        self.refresh_tunnels()

    def set_status(self, message: str) -> None:
        self.query_one("#status-bar", Static).update(message)

    def refresh_tunnels(self) -> None:
        """Sync the sidebar with the supervisor and redraw the output pane."""
        summaries = self.supervisor.list()
        list_view = self.query_one("#tunnel-list", ListView)
        current_ids = {summary.id for summary in summaries}

        for tunnel_id in list(self._items):
            if tunnel_id not in current_ids:
                self._items.pop(tunnel_id).remove()

        if self.selected_tunnel_id not in current_ids:
            self.selected_tunnel_id = summaries[-1].id if summaries else None

        for summary in summaries:
            view = TunnelView.from_summary(summary, self.ui_palette)
            selected = summary.id == self.selected_tunnel_id
            item = self._items.get(summary.id)
            if item is None:
                item = TunnelListItem(view, self.ui_palette)
                self._items[summary.id] = item
                list_view.append(item)
            item.set_view(view, selected)

        self.query_one("#empty-hint", Static).display = not summaries
        self.refresh_output(summaries)

    def refresh_output(self, summaries: list[TunnelSummary] | None = None) -> None:
        summaries = self.supervisor.list() if summaries is None else summaries
        summary = next(
            (s for s in summaries if s.id == self.selected_tunnel_id), None
        )
        logs: list[str] = []
        if summary is not None:
            try:
                logs = self.supervisor.logs(summary.id, self.config.visible_log_lines)
            except TunnelNotFoundError:
                summary = None

        output = self.query_one("#output", VerticalScroll)
        follow = output.scroll_y >= output.max_scroll_y
        rule_width = max(output.size.width - 4, 10)
        self.query_one("#tunnel-output", Static).update(
            render_tunnel_detail(summary, logs, self.ui_palette, rule_width)
        )
        if follow:
            output.call_after_refresh(output.scroll_end, animate=False)

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        if isinstance(event.item, TunnelListItem):
            self.selected_tunnel_id = event.item.tunnel_id
            self.refresh_tunnels()

    def action_cursor_down(self) -> None:
        self.query_one("#tunnel-list", ListView).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#tunnel-list", ListView).action_cursor_up()

    def action_new_tunnel(self) -> None:
        wizard = TunnelWizard(list_hosts(self.config.ssh_config_path))
        self.push_screen(
            NewTunnelScreen(wizard, self.ui_palette, self.config.connect_delay),
            callback=self._start_tunnel,
        )

    def _start_tunnel(self, request: TunnelRequest | None) -> None:
        if request is None:
            self.set_status(READY_STATUS)
            return
        try:
            tunnel_id = self.supervisor.start(request)
        except TunnelStartError as e:
            logger.error("Tunnel creation failed", host=request.host, error=str(e))
            self.notify(str(e), title="Tunnel not created", severity="error")
            self.set_status(f"Failed to create tunnel {request.tag}")
            return

        self.selected_tunnel_id = tunnel_id
        self.notify(
            f"{request.host}  {request.local_port} → {request.remote_port}",
            title=f"Tunnel {request.tag} started",
        )
        self.set_status(f"Tunnel {request.tag} started")
        self.refresh_tunnels()
        list_view = self.query_one("#tunnel-list", ListView)
        list_view.call_after_refresh(self._highlight_selected)

    def _highlight_selected(self) -> None:
        list_view = self.query_one("#tunnel-list", ListView)
        for index, child in enumerate(list_view.children):
            if isinstance(child, TunnelListItem) and child.tunnel_id == self.selected_tunnel_id:
                list_view.index = index
                return

    def action_delete_tunnel(self) -> None:
        if self.selected_tunnel_id is None:
            return
        try:
            summary = self.supervisor.get(self.selected_tunnel_id)
        except TunnelNotFoundError:
            self.refresh_tunnels()
            return

        body = Text()
        body.append("Delete tunnel ")
        body.append(summary.tag, style=self.ui_palette.highlight)
        body.append(f"?\nHost: {summary.host} → {summary.remote_port}")
        self.push_screen(
            ConfirmScreen("Delete Tunnel", body, self.ui_palette, "Yes, delete"),
            callback=lambda confirmed: self._delete_tunnel(summary.id, confirmed),
        )

    def _delete_tunnel(self, tunnel_id: int, confirmed: bool | None) -> None:
        if not confirmed:
            return
        try:
            removed = self.supervisor.remove(tunnel_id)
        except TunnelNotFoundError:
            logger.warning("Tunnel already removed", tunnel_id=tunnel_id)
        else:
            self.set_status(f"Tunnel {removed.tag} deleted")
        self.refresh_tunnels()

    def action_help(self) -> None:
        self.push_screen(HelpScreen(self.ui_palette, __version__))

    def action_request_quit(self) -> None:
        if self._quit_pending:
            # Second ctrl+c while the confirmation is open forces the quit.
            self._quit(True)
            return
        self._quit_pending = True
        active = self.supervisor.active_count
        body = Text()
        if active:
            body.append("You have ")
            body.append(str(active), style=self.ui_palette.highlight)
            body.append(" active tunnel(s).\nAll tunnels will be closed.")
        else:
            body.append("Are you sure you want to quit?")
        self.push_screen(
            ConfirmScreen(
                "Quit Confirmation",
                body,
                self.ui_palette,
                "Yes, quit",
                extra_confirm_keys=("q", "ctrl+c"),
            ),
            callback=self._quit,
        )

    def _quit(self, confirmed: bool | None) -> None:
        self._quit_pending = False
        if confirmed:
            self.supervisor.shutdown_all()
            self.exit()
