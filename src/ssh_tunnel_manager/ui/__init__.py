"""Terminal UI built on Textual."""

from .app import TunnelManagerApp, TunnelsChanged
from .theme import DEFAULT_PALETTE, Palette
from .views import TunnelView, render_tunnel_detail

__all__ = [
    "TunnelManagerApp",
    "TunnelsChanged",
    "Palette",
    "DEFAULT_PALETTE",
    "TunnelView",
    "render_tunnel_detail",
]
