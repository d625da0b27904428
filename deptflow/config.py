"""Configuration and shared settings."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


ESB1_PORT = _env_int("ESB1_PORT", 3001)
ESB2_PORT = _env_int("ESB2_PORT", 3002)

# Department web UI ports
UI_PORTS = {
    "data-analysis": _env_int("UI_DATA_ANALYSIS_PORT", 4001),
    "commercial": _env_int("UI_COMMERCIAL_PORT", 4002),
    "finance": _env_int("UI_FINANCE_PORT", 4003),
    "marketing": _env_int("UI_MARKETING_PORT", 4004),
    "it": _env_int("UI_IT_PORT", 4005),
    "logistics": _env_int("UI_LOGISTICS_PORT", 4006),
    "merchandising": _env_int("UI_MERCHANDISING_PORT", 4007),
}

CONFIG = {
    # Camunda 8 (SaaS or self-managed) REST gateway
    "zeebe_rest_address": os.getenv("ZEEBE_REST_ADDRESS", "http://localhost:8080").rstrip("/"),
    "zeebe_client_id": os.getenv("ZEEBE_CLIENT_ID", ""),
    "zeebe_client_secret": os.getenv("ZEEBE_CLIENT_SECRET", ""),
    "camunda_oauth_url": os.getenv("CAMUNDA_OAUTH_URL", "https://login.cloud.camunda.io/oauth/token"),
    "zeebe_token_audience": os.getenv("ZEEBE_TOKEN_AUDIENCE", "zeebe.camunda.io"),
    "worker_name": os.getenv("ZEEBE_WORKER_NAME", "deptflow"),
    # Terminal workers complete within this window
    "job_timeout_ms": _env_int("JOB_TIMEOUT_MS", 5 * 60 * 1000),
    # Web UI jobs wait for a human to open the dashboard
    "ui_job_timeout_ms": _env_int("UI_JOB_TIMEOUT_MS", 60 * 60 * 1000),
    "poll_request_timeout_ms": _env_int("POLL_REQUEST_TIMEOUT_MS", 20 * 1000),
    "poll_interval_seconds": _env_float("POLL_INTERVAL_SECONDS", 1.0),
    # ESB routing
    "esb1_port": ESB1_PORT,
    "esb2_port": ESB2_PORT,
    "esb1_url": os.getenv("ESB1_URL", f"http://localhost:{ESB1_PORT}").rstrip("/"),
    "esb2_url": os.getenv("ESB2_URL", f"http://localhost:{ESB2_PORT}").rstrip("/"),
    "esb_timeout_seconds": _env_float("ESB_TIMEOUT_SECONDS", 10.0),
    "esb_health_timeout_seconds": 5.0,
    # Simulated workers answer prompts on their own
    "simulated_delay_seconds": _env_float("SIMULATED_DELAY_SECONDS", 0.5),
    "simulated_approve": _env_flag("SIMULATED_APPROVE", "true"),
    "ui_ports": UI_PORTS,
}


# ── Typed config ──────────────────────────────────────


@dataclass
class CamundaConfig:
    rest_address: str = "http://localhost:8080"
    client_id: str = ""
    client_secret: str = ""
    oauth_url: str = "https://login.cloud.camunda.io/oauth/token"
    token_audience: str = "zeebe.camunda.io"
    worker_name: str = "deptflow"
    job_timeout_ms: int = 5 * 60 * 1000
    ui_job_timeout_ms: int = 60 * 60 * 1000

    @property
    def uses_oauth(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass
class EsbConfig:
    esb1_port: int = 3001
    esb2_port: int = 3002
    esb1_url: str = "http://localhost:3001"
    esb2_url: str = "http://localhost:3002"
    timeout_seconds: float = 10.0


@dataclass
class SimulationConfig:
    delay_seconds: float = 0.5
    approve: bool = True


@dataclass
class AppConfig:
    """Typed view over CONFIG."""

    camunda: CamundaConfig = field(default_factory=CamundaConfig)
    esb: EsbConfig = field(default_factory=EsbConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    ui_ports: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            camunda=CamundaConfig(
                rest_address=CONFIG["zeebe_rest_address"],
                client_id=CONFIG["zeebe_client_id"],
                client_secret=CONFIG["zeebe_client_secret"],
                oauth_url=CONFIG["camunda_oauth_url"],
                token_audience=CONFIG["zeebe_token_audience"],
                worker_name=CONFIG["worker_name"],
                job_timeout_ms=CONFIG["job_timeout_ms"],
                ui_job_timeout_ms=CONFIG["ui_job_timeout_ms"],
            ),
            esb=EsbConfig(
                esb1_port=CONFIG["esb1_port"],
                esb2_port=CONFIG["esb2_port"],
                esb1_url=CONFIG["esb1_url"],
                esb2_url=CONFIG["esb2_url"],
                timeout_seconds=CONFIG["esb_timeout_seconds"],
            ),
            simulation=SimulationConfig(
                delay_seconds=CONFIG["simulated_delay_seconds"],
                approve=CONFIG["simulated_approve"],
            ),
            ui_ports=dict(UI_PORTS),
        )
