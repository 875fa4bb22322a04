"""Command-line entry point."""

import sys

from pydantic import ValidationError

from .common.logging import get_logger, setup_logging
from .config import AppConfig
from .tunnel.supervisor import TunnelSupervisor

logger = get_logger(__name__)


def run(config: AppConfig) -> int:
    """Run the terminal UI until the user quits.

    Every tunnel still active when the UI stops is killed on the way out.

    Returns:
        Process exit code
    """
    from .ui.app import TunnelManagerApp  # noqa: PLC0415

    with TunnelSupervisor(config) as supervisor:
        app = TunnelManagerApp(config, supervisor=supervisor)
        try:
            app.run()
        except Exception as e:
            logger.error("Terminal UI failed", error=str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return app.return_code or 0


def main() -> int:
    """``ssh-tunnel-manager`` console script. Takes no arguments."""
    try:
        config = AppConfig.from_env()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(level=config.log_level, log_file=config.log_file)
    logger.info("Starting ssh-tunnel-manager", ssh_binary=config.ssh_binary)
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
