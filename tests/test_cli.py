"""Tests for mqttui.cli: option precedence and the main() wiring."""

import pytest

import mqttui.cli
import mqttui.io.logging_setup
from mqttui.core.session import CoreSession


class TestLoadConfig:
    def test_defaults(self):
        cfg = mqttui.cli.load_config([], environ={})
        assert cfg.broker.url == "tcp://localhost:1883"
        assert cfg.follow_margin == 5

    def test_env_used_when_no_flag(self):
        cfg = mqttui.cli.load_config([], environ={"MQTT_BROKER": "mqtt://env-host"})
        assert cfg.broker.host == "env-host"

    def test_flag_overrides_env(self):
        cfg = mqttui.cli.load_config(
            ["--broker", "tcp://flag-host:1884", "--follow-margin", "2", "--client-id", "me"],
            environ={"MQTT_BROKER": "mqtt://env-host", "MQTTUI_FOLLOW_MARGIN": "9"},
        )
        assert (cfg.broker.host, cfg.broker.port) == ("flag-host", 1884)
        assert cfg.follow_margin == 2
        assert cfg.broker.client_id == "me"

    def test_credentials(self):
        cfg = mqttui.cli.load_config(["--username", "u", "--password", "p"], environ={})
        assert (cfg.broker.username, cfg.broker.password) == ("u", "p")

    def test_log_console_flag(self):
        assert not mqttui.cli.load_config([], environ={}).log_console
        assert mqttui.cli.load_config(["--log-console"], environ={}).log_console

    def test_log_console_from_env(self):
        cfg = mqttui.cli.load_config([], environ={"MQTTUI_LOG_CONSOLE": "1"})
        assert cfg.log_console

    def test_invalid_value_exits_with_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc:
            mqttui.cli.load_config(["--broker", "http://nope"], environ={})
        assert exc.value.code == 2
        assert "unsupported broker scheme" in capsys.readouterr().err


class _FakeApp:
    instances: list["_FakeApp"] = []

    def __init__(self, session, events, gateway=None):
        self.session = session
        self.events = events
        self.gateway = gateway
        self.ran = False
        _FakeApp.instances.append(self)

    def run(self):
        self.ran = True


class TestMain:
    @pytest.fixture(autouse=True)
    def _fake_app(self, monkeypatch, tmp_path):
        _FakeApp.instances = []
        monkeypatch.setattr(mqttui.cli, "MqttuiApp", _FakeApp)
        monkeypatch.setenv("MQTTUI_LOG_FILE", str(tmp_path / "cli.log"))
        for var in ("MQTT_BROKER", "MQTT_USERNAME", "MQTT_PASSWORD", "MQTT_CLIENT_ID", "MQTTUI_LOG_CONSOLE"):
            monkeypatch.delenv(var, raising=False)

    def test_main_wires_gateway_and_runs(self, monkeypatch, capsys):
        created = {}

        class FakeGateway:
            def __init__(self, config, events, *, discovery_window):
                created.update(config=config, events=events, window=discovery_window)

        monkeypatch.setattr(mqttui.cli, "BrokerGateway", FakeGateway)
        mqttui.cli.main(["--broker", "tcp://h:1999", "--discovery-window", "0.5"])

        (app,) = _FakeApp.instances
        assert app.ran
        assert isinstance(app.gateway, FakeGateway)
        assert created["window"] == 0.5
        assert created["events"] is app.events
        assert isinstance(app.session, CoreSession)
        assert app.session.broker == "tcp://h:1999"
        assert "Disconnected from tcp://h:1999. Goodbye!" in capsys.readouterr().out

    def test_client_creation_failure_runs_offline(self, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("bad transport")

        monkeypatch.setattr(mqttui.cli, "BrokerGateway", broken)
        mqttui.cli.main([])

        (app,) = _FakeApp.instances
        assert app.gateway is None
        assert "bad transport" in app.session.last_error

    def test_log_console_reaches_logging_setup(self, monkeypatch):
        seen = {}

        def fake_configure(client_id, *, console=False, environ=None):
            seen.update(client_id=client_id, console=console)
            return mqttui.io.logging_setup.LoggingRuntime("INFO", 20, "x.log", console)

        monkeypatch.setattr(mqttui.io.logging_setup, "configure", fake_configure)
        monkeypatch.setattr(mqttui.cli, "BrokerGateway", lambda *a, **kw: None)
        mqttui.cli.main(["--log-console", "--client-id", "viewer"])

        assert seen == {"client_id": "viewer", "console": True}
