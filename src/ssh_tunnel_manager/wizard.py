"""New-tunnel wizard as an explicit finite state machine.

The wizard walks host -> remote port -> local port -> tag -> verbose and ends
in ``CONNECTING`` with a ready ``TunnelRequest`` (or in ``CANCELLED``).
``TRANSITIONS`` maps each ``(step, event)`` pair to the handler deciding the
next step; pairs missing from the table are ignored.
"""

from collections.abc import Callable
from enum import Enum

from .common.exceptions import InputValidationError
from .common.logging import get_logger
from .common.utils import random_tag, validate_host, validate_port
from .hosts import extract_all_hostnames, extract_hostname
from .ports import is_port_bound
from .tunnel.models import TunnelRequest

logger = get_logger(__name__)

MAX_HOST_VISIBLE = 10


class WizardStep(str, Enum):
    """Wizard step enumeration."""

    HOST = "host"
    HOST_IP = "host_ip"
    MANUAL_HOST = "manual_host"
    REMOTE_PORT = "remote_port"
    LOCAL_PORT = "local_port"
    TAG = "tag"
    VERBOSE = "verbose"
    CONNECTING = "connecting"
    CANCELLED = "cancelled"


class WizardEvent(str, Enum):
    """Input events understood by the wizard."""

    UP = "up"
    DOWN = "down"
    SELECT = "select"
    MANUAL = "manual"
    BACK = "back"
    YES = "yes"
    NO = "no"
    CHAR = "char"
    BACKSPACE = "backspace"


TEXT_STEPS = frozenset(
    {
        WizardStep.MANUAL_HOST,
        WizardStep.REMOTE_PORT,
        WizardStep.LOCAL_PORT,
        WizardStep.TAG,
    }
)
TERMINAL_STEPS = frozenset({WizardStep.CONNECTING, WizardStep.CANCELLED})


def _accept_digit(ch: str) -> str | None:
    return ch if ch.isascii() and ch.isdigit() else None


def _accept_host_char(ch: str) -> str | None:
    if ch.isascii() and (ch.isalnum() or ch in ".-@"):
        return ch
    return None


def _accept_tag_char(ch: str) -> str | None:
    if ch == " ":
        return "_"
    if ch.isascii() and (ch.isalnum() or ch in "-_"):
        return ch.lower()
    return None


CHAR_FILTERS: dict[WizardStep, Callable[[str], str | None]] = {
    WizardStep.MANUAL_HOST: _accept_host_char,
    WizardStep.REMOTE_PORT: _accept_digit,
    WizardStep.LOCAL_PORT: _accept_digit,
    WizardStep.TAG: _accept_tag_char,
}

_LIST_KEYS = {
    "up": WizardEvent.UP,
    "k": WizardEvent.UP,
    "down": WizardEvent.DOWN,
    "j": WizardEvent.DOWN,
    "enter": WizardEvent.SELECT,
    "escape": WizardEvent.BACK,
}

_TEXT_KEYS = {
    "enter": WizardEvent.SELECT,
    "escape": WizardEvent.BACK,
    "backspace": WizardEvent.BACKSPACE,
}

_VERBOSE_KEYS = {
    "y": WizardEvent.YES,
    "Y": WizardEvent.YES,
    "n": WizardEvent.NO,
    "N": WizardEvent.NO,
    "enter": WizardEvent.SELECT,
    "escape": WizardEvent.BACK,
}


class TunnelWizard:
    """Collects the parameters of one tunnel.

    Args:
        hosts: Host directory entries to choose from
        port_probe: Returns True when a local port is already bound
        tag_generator: Produces a tag when the user leaves it empty
    """

    def __init__(
        self,
        hosts: list[str],
        port_probe: Callable[[str], bool] | None = None,
        tag_generator: Callable[[], str] | None = None,
    ):
        self.hosts = list(hosts)
        self.port_probe = port_probe or is_port_bound
        self.tag_generator = tag_generator or random_tag

        self.step = WizardStep.HOST
        self.cursor = 0
        self.host_scroll = 0
        self.host_ips: list[str] = []
        self.host_ip_index = 0
        self.host_ip_scroll = 0
        self.input = ""
        self.error: str | None = None

        self.host = ""
        self.remote_port = ""
        self.local_port = ""
        self.tag = ""
        self.verbose = False

    @property
    def done(self) -> bool:
        return self.step in TERMINAL_STEPS

    @property
    def request(self) -> TunnelRequest | None:
        """The collected request once the wizard reached ``CONNECTING``."""
        if self.step != WizardStep.CONNECTING:
            return None
        return TunnelRequest(
            host=self.host,
            remote_port=self.remote_port,
            local_port=self.local_port,
            tag=self.tag,
            verbose=self.verbose,
        )

    @property
    def selected_host_entry(self) -> str | None:
        if 0 <= self.cursor < len(self.hosts):
            return self.hosts[self.cursor]
        return None

    def press(self, key: str, character: str | None = None) -> WizardStep:
        """Translate a terminal key into a wizard event and apply it.

        Args:
            key: Key name as reported by the terminal (``enter``, ``up``, ``a``)
            character: Printable character for the key, if any

        Returns:
            The step after handling the key
        """
        if self.step in TEXT_STEPS:
            event = _TEXT_KEYS.get(key)
            if event is None and character and len(character) == 1:
                return self.handle(WizardEvent.CHAR, character)
        elif self.step == WizardStep.VERBOSE:
            event = _VERBOSE_KEYS.get(key)
            if event is None and character:
                event = _VERBOSE_KEYS.get(character)
        else:
            event = _LIST_KEYS.get(key)
            if event is None and key == "m" and self.step == WizardStep.HOST:
                event = WizardEvent.MANUAL

        if event is None:
            return self.step
        return self.handle(event)

    def handle(self, event: WizardEvent, character: str | None = None) -> WizardStep:
        """Apply one event. Unknown ``(step, event)`` pairs leave the state as is."""
        handler = TRANSITIONS.get((self.step, event))
        if handler is None:
            return self.step

        previous = self.step
        next_step = handler(self, character)
        if next_step != previous:
            logger.debug("Wizard transition", source=previous.value, target=next_step.value)
        self.step = next_step
        return next_step

    # List navigation

    def _host_up(self, _: str | None) -> WizardStep:
        if self.cursor > 0:
            self.cursor -= 1
        if self.cursor < self.host_scroll:
            self.host_scroll = self.cursor
        return self.step

    def _host_down(self, _: str | None) -> WizardStep:
        if self.cursor < len(self.hosts) - 1:
            self.cursor += 1
        if self.cursor >= self.host_scroll + MAX_HOST_VISIBLE:
            self.host_scroll = self.cursor - MAX_HOST_VISIBLE + 1
        return self.step

    def _host_select(self, _: str | None) -> WizardStep:
        entry = self.selected_host_entry
        if entry is None:
            return self.step
        fields = extract_all_hostnames(entry)
        if len(fields) > 1:
            self.host_ips = fields
            self.host_ip_index = 0
            self.host_ip_scroll = 0
            return WizardStep.HOST_IP
        if not self._set_host(extract_hostname(entry)):
            return self.step
        return WizardStep.REMOTE_PORT

    def _host_manual(self, _: str | None) -> WizardStep:
        self._reset_input()
        return WizardStep.MANUAL_HOST

    def _host_ip_up(self, _: str | None) -> WizardStep:
        if self.host_ip_index > 0:
            self.host_ip_index -= 1
        if self.host_ip_index < self.host_ip_scroll:
            self.host_ip_scroll = self.host_ip_index
        return self.step

    def _host_ip_down(self, _: str | None) -> WizardStep:
        if self.host_ip_index < len(self.host_ips) - 1:
            self.host_ip_index += 1
        if self.host_ip_index >= self.host_ip_scroll + MAX_HOST_VISIBLE:
            self.host_ip_scroll = self.host_ip_index - MAX_HOST_VISIBLE + 1
        return self.step

    def _host_ip_select(self, _: str | None) -> WizardStep:
        if not self._set_host(self.host_ips[self.host_ip_index]):
            return self.step
        self.host_ips = []
        return WizardStep.REMOTE_PORT

    def _host_ip_back(self, _: str | None) -> WizardStep:
        self.host_ips = []
        self.error = None
        return WizardStep.HOST

    # Text input

    def _type(self, character: str | None) -> WizardStep:
        if not character:
            return self.step
        accepted = CHAR_FILTERS[self.step](character)
        if accepted:
            self.input += accepted
        return self.step

    def _backspace(self, _: str | None) -> WizardStep:
        self.input = self.input[:-1]
        return self.step

    def _manual_host_submit(self, _: str | None) -> WizardStep:
        if not self._set_host(self.input):
            return self.step
        self._reset_input()
        return WizardStep.REMOTE_PORT

    def _set_host(self, value: str) -> bool:
        """Store a validated host, or record the error and return False."""
        try:
            self.host = validate_host(value)
        except InputValidationError as e:
            self.error = str(e).lower()
            return False
        self.error = None
        return True

    def _remote_port_submit(self, _: str | None) -> WizardStep:
        try:
            self.remote_port = str(validate_port(self.input, "Remote port"))
        except InputValidationError as e:
            self.error = str(e)
            self.input = ""
            return self.step
        self._reset_input()
        return WizardStep.LOCAL_PORT

    def _local_port_submit(self, _: str | None) -> WizardStep:
        try:
            port = str(validate_port(self.input, "Local port"))
        except InputValidationError as e:
            self.error = str(e)
            self.input = ""
            return self.step
        if self.port_probe(port):
            self.error = f"port {port} is already in use"
            self.input = ""
            return self.step
        self.local_port = port
        self._reset_input()
        return WizardStep.TAG

    def _tag_submit(self, _: str | None) -> WizardStep:
        self.tag = self.input or self.tag_generator()
        self._reset_input()
        return WizardStep.VERBOSE

    # Verbose prompt

    def _verbose_yes(self, _: str | None) -> WizardStep:
        self.verbose = True
        return WizardStep.CONNECTING

    def _verbose_no(self, _: str | None) -> WizardStep:
        self.verbose = False
        return WizardStep.CONNECTING

    def _cancel(self, _: str | None) -> WizardStep:
        self._reset_input()
        return WizardStep.CANCELLED

    def _reset_input(self) -> None:
        self.input = ""
        self.error = None


TRANSITIONS: dict[
    tuple[WizardStep, WizardEvent],
    Callable[[TunnelWizard, str | None], WizardStep],
] = {
    (WizardStep.HOST, WizardEvent.UP): TunnelWizard._host_up,
    (WizardStep.HOST, WizardEvent.DOWN): TunnelWizard._host_down,
    (WizardStep.HOST, WizardEvent.SELECT): TunnelWizard._host_select,
    (WizardStep.HOST, WizardEvent.MANUAL): TunnelWizard._host_manual,
    (WizardStep.HOST, WizardEvent.BACK): TunnelWizard._cancel,
    (WizardStep.HOST_IP, WizardEvent.UP): TunnelWizard._host_ip_up,
    (WizardStep.HOST_IP, WizardEvent.DOWN): TunnelWizard._host_ip_down,
    (WizardStep.HOST_IP, WizardEvent.SELECT): TunnelWizard._host_ip_select,
    (WizardStep.HOST_IP, WizardEvent.BACK): TunnelWizard._host_ip_back,
    (WizardStep.MANUAL_HOST, WizardEvent.CHAR): TunnelWizard._type,
    (WizardStep.MANUAL_HOST, WizardEvent.BACKSPACE): TunnelWizard._backspace,
    (WizardStep.MANUAL_HOST, WizardEvent.SELECT): TunnelWizard._manual_host_submit,
    (WizardStep.MANUAL_HOST, WizardEvent.BACK): TunnelWizard._cancel,
    (WizardStep.REMOTE_PORT, WizardEvent.CHAR): TunnelWizard._type,
    (WizardStep.REMOTE_PORT, WizardEvent.BACKSPACE): TunnelWizard._backspace,
    (WizardStep.REMOTE_PORT, WizardEvent.SELECT): TunnelWizard._remote_port_submit,
    (WizardStep.REMOTE_PORT, WizardEvent.BACK): TunnelWizard._cancel,
    (WizardStep.LOCAL_PORT, WizardEvent.CHAR): TunnelWizard._type,
    (WizardStep.LOCAL_PORT, WizardEvent.BACKSPACE): TunnelWizard._backspace,
    (WizardStep.LOCAL_PORT, WizardEvent.SELECT): TunnelWizard._local_port_submit,
    (WizardStep.LOCAL_PORT, WizardEvent.BACK): TunnelWizard._cancel,
    (WizardStep.TAG, WizardEvent.CHAR): TunnelWizard._type,
    (WizardStep.TAG, WizardEvent.BACKSPACE): TunnelWizard._backspace,
    (WizardStep.TAG, WizardEvent.SELECT): TunnelWizard._tag_submit,
    (WizardStep.TAG, WizardEvent.BACK): TunnelWizard._cancel,
    (WizardStep.VERBOSE, WizardEvent.YES): TunnelWizard._verbose_yes,
    (WizardStep.VERBOSE, WizardEvent.NO): TunnelWizard._verbose_no,
    (WizardStep.VERBOSE, WizardEvent.SELECT): TunnelWizard._verbose_no,
    (WizardStep.VERBOSE, WizardEvent.BACK): TunnelWizard._cancel,
}
