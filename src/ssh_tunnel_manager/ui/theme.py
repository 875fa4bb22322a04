"""Colour palette shared by every widget."""

from pydantic import BaseModel, ConfigDict, Field

_HEX = r"^#[0-9A-Fa-f]{6}$"


class Palette(BaseModel):
    """Read-only colour table, created once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = Field(default="#61AFEF", pattern=_HEX)
    error: str = Field(default="#E06C75", pattern=_HEX)
    success: str = Field(default="#98C379", pattern=_HEX)
    selected: str = Field(default="#E5C07B", pattern=_HEX)
    subtle: str = Field(default="#5C6370", pattern=_HEX)
    highlight: str = Field(default="#D19A66", pattern=_HEX)
    accent: str = Field(default="#C678DD", pattern=_HEX)
    border: str = Field(default="#5C6370", pattern=_HEX)
    status_fg: str = Field(default="#ABB2BF", pattern=_HEX)
    status_bg: str = Field(default="#282C34", pattern=_HEX)
    overlay_bg: str = Field(default="#1E2127", pattern=_HEX)

    def css_variables(self) -> dict[str, str]:
        """Expose colours as ``$tunnel-<name>`` Textual CSS variables."""
        return {
            f"tunnel-{name.replace('_', '-')}": value
            for name, value in self.model_dump().items()
        }


DEFAULT_PALETTE = Palette()
