"""Tests for the console entry point."""

from unittest.mock import Mock, patch

from ssh_tunnel_manager import cli
from ssh_tunnel_manager.config import ENV_PREFIX, AppConfig


class TestRun:
    """Test cases for cli.run"""

    @patch("ssh_tunnel_manager.ui.app.TunnelManagerApp")
    def test_run_returns_zero(self, mock_app_cls, app_config):
        mock_app_cls.return_value.return_code = None

        assert cli.run(app_config) == 0

        mock_app_cls.return_value.run.assert_called_once()
        _, kwargs = mock_app_cls.call_args
        assert kwargs["supervisor"].config is app_config

    @patch("ssh_tunnel_manager.ui.app.TunnelManagerApp")
    def test_run_shuts_down_supervisor(self, mock_app_cls, app_config):
        """Tunnels left running when the UI stops are killed"""
        mock_app_cls.return_value.return_code = 0

        with patch.object(cli.TunnelSupervisor, "shutdown_all") as shutdown:
            cli.run(app_config)

        shutdown.assert_called_once()

    @patch("ssh_tunnel_manager.ui.app.TunnelManagerApp")
    def test_run_reports_ui_failure(self, mock_app_cls, app_config, capsys):
        mock_app_cls.return_value.run.side_effect = RuntimeError("no terminal")

        assert cli.run(app_config) == 1

        assert "Error: no terminal" in capsys.readouterr().err


class TestMain:
    """Test cases for cli.main"""

    def test_invalid_configuration(self, monkeypatch, capsys):
        monkeypatch.setenv(f"{ENV_PREFIX}LOG_CAPACITY", "0")

        assert cli.main() == 2

        assert "invalid configuration" in capsys.readouterr().err

    def test_main_configures_logging_and_runs(self, monkeypatch, tmp_path):
        monkeypatch.setenv(f"{ENV_PREFIX}LOG_LEVEL", "debug")
        monkeypatch.setenv(f"{ENV_PREFIX}LOG_FILE", str(tmp_path / "app.log"))
        run = Mock(return_value=0)
        setup_logging = Mock()
        monkeypatch.setattr(cli, "run", run)
        monkeypatch.setattr(cli, "setup_logging", setup_logging)

        assert cli.main() == 0

        setup_logging.assert_called_once_with(
            level="DEBUG", log_file=tmp_path / "app.log"
        )
        [config] = run.call_args.args
        assert isinstance(config, AppConfig)
        assert config.log_level == "DEBUG"
