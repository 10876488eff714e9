"""Tests for the command line entry point."""

import pytest

import powerpal_exporter.cli as cli
import powerpal_exporter.runner as runner


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("POWERPAL_TOKEN", "POWERPAL_DEVICE", "POWERPAL_HOST", "POWERPAL_REFRESH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _parse(*argv: str):
    return cli.create_parser().parse_args(list(argv))


class TestLoadSettings:
    def test_flags(self):
        settings = cli.load_settings(
            _parse(
                "--token", "tok",
                "--device", "dev",
                "--powerpal-host", "api.example.com",
                "--refresh", "10",
                "--web.listen-address", "127.0.0.1:9000",
                "--web.access-log",
                "--log.level", "warn",
            )
        )

        assert settings.token == "tok"
        assert settings.device == "dev"
        assert settings.powerpal_host == "api.example.com"
        assert settings.refresh_seconds == 10
        assert settings.listen_address == "127.0.0.1:9000"
        assert settings.access_log is True
        assert settings.log_level == "warn"

    def test_env_vars_used_when_flags_absent(self, monkeypatch):
        monkeypatch.setenv("POWERPAL_TOKEN", "env-token")
        monkeypatch.setenv("POWERPAL_DEVICE", "env-device")

        settings = cli.load_settings(_parse())

        assert settings.token == "env-token"
        assert settings.device == "env-device"
        assert settings.access_log is False

    def test_flags_override_env_vars(self, monkeypatch):
        monkeypatch.setenv("POWERPAL_TOKEN", "env-token")
        monkeypatch.setenv("POWERPAL_DEVICE", "env-device")

        settings = cli.load_settings(_parse("--device", "flag-device"))

        assert settings.token == "env-token"
        assert settings.device == "flag-device"

    def test_invalid_env_value_is_a_configuration_error(self, monkeypatch):
        monkeypatch.setenv("POWERPAL_REFRESH", "soon")

        with pytest.raises(cli.ConfigurationError, match="Invalid configuration value"):
            cli.load_settings(_parse("--token", "t", "--device", "d"))


class TestMain:
    def test_missing_token_exits_before_running(self, monkeypatch, capsys):
        run_calls = []
        monkeypatch.setattr(runner, "run", lambda settings: run_calls.append(settings) or 0)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--device", "dev"])

        assert exc_info.value.code == 1
        assert "token must be supplied" in capsys.readouterr().err
        assert run_calls == []

    def test_missing_device_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--token", "tok"])

        assert exc_info.value.code == 1
        assert "device identifier must be supplied" in capsys.readouterr().err

    def test_runs_with_valid_settings(self, monkeypatch):
        received = []
        monkeypatch.setattr(runner, "run", lambda settings: received.append(settings) or 0)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--token", "tok", "--device", "dev"])

        assert exc_info.value.code == 0
        assert received[0].token == "tok"

    def test_run_exit_code_is_propagated(self, monkeypatch):
        monkeypatch.setattr(runner, "run", lambda settings: 1)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--token", "tok", "--device", "dev"])

        assert exc_info.value.code == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])

        assert exc_info.value.code == 0
        assert "powerpal-exporter" in capsys.readouterr().out

    def test_rejects_unknown_log_level(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--log.level", "verbose"])

        assert exc_info.value.code == 2
