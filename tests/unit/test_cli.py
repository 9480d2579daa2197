"""Tests for the command-line interface."""

import json
import logging

from cortex_connector.cli import main
from cortex_connector.connector import CortexConnector
from cortex_connector.models import HealthValue

from tests.unit.helpers.factories import StubInstanceClient, make_pool


def stub_factory(*clients):
    def factory(_settings):
        return CortexConnector(make_pool(*clients))

    return factory


class TestCli:
    def test_status(self, capsys):
        factory = stub_factory(
            StubInstanceClient("a"), StubInstanceClient("b", status="ERROR")
        )

        assert main(["status"], connector_factory=factory) == 0

        out = json.loads(capsys.readouterr().out)
        assert out["status"] == "WARNING"
        assert [s["name"] for s in out["servers"]] == ["a", "b"]

    def test_health(self, capsys):
        factory = stub_factory(StubInstanceClient("a", health=HealthValue.ERROR))

        assert main(["health"], connector_factory=factory) == 0

        assert json.loads(capsys.readouterr().out) == {"health": "Error"}

    def test_analyzers(self, capsys):
        factory = stub_factory(
            StubInstanceClient("a", analyzers=["MaxMind_GeoIP"]),
            StubInstanceClient("b", analyzers=["MaxMind_GeoIP"]),
        )

        assert main(["analyzers"], connector_factory=factory) == 0

        out = json.loads(capsys.readouterr().out)
        assert [a["id"] for a in out] == ["MaxMind_GeoIP", "MaxMind_GeoIP"]

    def test_submit(self, capsys):
        target = StubInstanceClient("b")
        factory = stub_factory(StubInstanceClient("a"), target)

        code = main(
            ["submit", "--analyzer", "MaxMind_GeoIP", "--artifact", "art-1", "--instance", "b"],
            connector_factory=factory,
        )

        assert code == 0
        assert json.loads(capsys.readouterr().out)["instance_id"] == "b"
        assert target.submitted[0].artifact_id == "art-1"

    def test_routing_error_exit_code(self, capsys):
        factory = stub_factory(StubInstanceClient("a"))

        code = main(["job", "--id", "job-404"], connector_factory=factory)

        assert code == 1
        out = json.loads(capsys.readouterr().out)
        assert out["ok"] is False
        assert out["error"]["error_code"] == "NOT_FOUND"

    def test_no_command(self, capsys):
        assert main([], connector_factory=stub_factory()) == 1

    def test_log_level_and_environment_from_config(self, tmp_path, monkeypatch, capsys):
        package_logger = logging.getLogger("cortex_connector")
        monkeypatch.setattr(package_logger, "level", package_logger.level)
        cfg = tmp_path / "cortex.yaml"
        cfg.write_text("environment: prod\nlog_level: warning\n", encoding="utf-8")
        seen = []

        def factory(settings):
            seen.append(settings)
            return CortexConnector(make_pool(StubInstanceClient("a")))

        assert main(["--config", str(cfg), "health"], connector_factory=factory) == 0

        assert package_logger.level == logging.WARNING
        assert seen[0].environment == "prod"

    def test_verbose_overrides_configured_level(self, tmp_path, monkeypatch, capsys):
        package_logger = logging.getLogger("cortex_connector")
        monkeypatch.setattr(package_logger, "level", package_logger.level)
        cfg = tmp_path / "cortex.yaml"
        cfg.write_text("log_level: ERROR\n", encoding="utf-8")

        main(["--config", str(cfg), "--verbose", "health"], connector_factory=stub_factory())

        assert package_logger.level == logging.DEBUG
