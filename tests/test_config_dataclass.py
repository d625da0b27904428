"""Tests for the typed AppConfig dataclass and env parsing."""

from deptflow import config
from deptflow.config import AppConfig, CamundaConfig, EsbConfig, SimulationConfig


class TestCamundaConfig:
    def test_defaults(self):
        c = CamundaConfig()
        assert c.rest_address == "http://localhost:8080"
        assert c.job_timeout_ms == 300000
        assert c.ui_job_timeout_ms == 3600000
        assert c.uses_oauth is False


class TestEsbConfig:
    def test_defaults(self):
        c = EsbConfig()
        assert (c.esb1_port, c.esb2_port) == (3001, 3002)
        assert c.esb1_url == "http://localhost:3001"


class TestAppConfig:
    def test_defaults(self):
        c = AppConfig()
        assert isinstance(c.camunda, CamundaConfig)
        assert isinstance(c.esb, EsbConfig)
        assert isinstance(c.simulation, SimulationConfig)
        assert c.ui_ports == {}

    def test_from_env(self):
        c = AppConfig.from_env()
        assert c.camunda.rest_address == config.CONFIG["zeebe_rest_address"]
        assert c.esb.esb2_url == config.CONFIG["esb2_url"]
        assert set(c.ui_ports) == {
            "data-analysis", "commercial", "finance", "marketing", "it", "logistics", "merchandising",
        }

    def test_ui_ports_are_distinct(self):
        ports = list(AppConfig.from_env().ui_ports.values())
        assert len(ports) == len(set(ports))


class TestEnvParsing:
    def test_int(self, monkeypatch):
        monkeypatch.setenv("DEPTFLOW_TEST_INT", "42")
        assert config._env_int("DEPTFLOW_TEST_INT", 1) == 42

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("DEPTFLOW_TEST_INT", "many")
        assert config._env_int("DEPTFLOW_TEST_INT", 1) == 1

    def test_missing_float(self, monkeypatch):
        monkeypatch.delenv("DEPTFLOW_TEST_FLOAT", raising=False)
        assert config._env_float("DEPTFLOW_TEST_FLOAT", 0.5) == 0.5

    def test_flag(self, monkeypatch):
        monkeypatch.setenv("DEPTFLOW_TEST_FLAG", "no")
        assert config._env_flag("DEPTFLOW_TEST_FLAG") is False
        monkeypatch.setenv("DEPTFLOW_TEST_FLAG", "Yes")
        assert config._env_flag("DEPTFLOW_TEST_FLAG") is True
