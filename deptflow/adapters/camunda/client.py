"""Camunda 8 orchestration cluster client using aiohttp (REST API v2)."""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from deptflow.config import CONFIG, CamundaConfig
from deptflow.domain.models import Deployment, Job, ProcessInstance

# Refresh the token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 30


class OrchestratorError(Exception):
    """Non-2xx answer from the orchestration cluster."""

    def __init__(self, status: int, detail: str):
        super().__init__(f"Orchestrator returned {status}: {detail}")
        self.status = status
        self.detail = detail


def _problem_detail(body: str) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return body or "no response body"
    if isinstance(data, dict):
        return data.get("detail") or data.get("title") or body
    return body


class CamundaClient:
    """Async client for the calls the department workers need."""

    def __init__(self, config: Optional[CamundaConfig] = None):
        if config is None:
            config = CamundaConfig(
                rest_address=CONFIG["zeebe_rest_address"],
                client_id=CONFIG["zeebe_client_id"],
                client_secret=CONFIG["zeebe_client_secret"],
                oauth_url=CONFIG["camunda_oauth_url"],
                token_audience=CONFIG["zeebe_token_audience"],
                worker_name=CONFIG["worker_name"],
                job_timeout_ms=CONFIG["job_timeout_ms"],
                ui_job_timeout_ms=CONFIG["ui_job_timeout_ms"],
            )
        self.config = config
        self.base_url = f"{config.rest_address.rstrip('/')}/v2"
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    # ── Auth ──────────────────────────────────────────

    async def _get_token(self) -> Optional[str]:
        if not self.config.uses_oauth:
            return None
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        form = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "audience": self.config.token_audience,
        }
        async with aiohttp.ClientSession() as session:
            async with session.post(self.config.oauth_url, data=form) as resp:
                body = await resp.text()
                if resp.status >= 400:
                    raise OrchestratorError(resp.status, f"OAuth token request failed: {_problem_detail(body)}")
                data = json.loads(body)

        self._token = data["access_token"]
        expires_in = int(data.get("expires_in") or 300)
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    async def _headers(self) -> Dict[str, str]:
        token = await self._get_token()
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    # ── Transport ─────────────────────────────────────

    async def _post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        form: Optional[aiohttp.FormData] = None,
        timeout_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = await self._headers()
        timeout = aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds else None
        kwargs: Dict[str, Any] = {"headers": headers}
        if form is not None:
            kwargs["data"] = form
        else:
            kwargs["json"] = payload or {}

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, **kwargs) as resp:
                body = await resp.text()
                if resp.status >= 400:
                    raise OrchestratorError(resp.status, _problem_detail(body))
                if not body:
                    return {}
                return json.loads(body)

    # ── Operations ────────────────────────────────────

    async def create_process_instance(
        self, process_id: str, variables: Optional[Dict[str, Any]] = None
    ) -> ProcessInstance:
        data = await self._post(
            "/process-instances",
            {"processDefinitionId": process_id, "variables": variables or {}},
        )
        return ProcessInstance.from_api(data)

    async def activate_jobs(
        self,
        task_type: str,
        worker: str,
        max_jobs: int = 1,
        timeout_ms: Optional[int] = None,
        request_timeout_ms: Optional[int] = None,
    ) -> List[Job]:
        """Long-poll for up to ``max_jobs`` jobs of ``task_type``."""
        if timeout_ms is None:
            timeout_ms = self.config.job_timeout_ms
        if request_timeout_ms is None:
            request_timeout_ms = CONFIG.get("poll_request_timeout_ms", 20000)
        data = await self._post(
            "/jobs/activation",
            {
                "type": task_type,
                "worker": worker,
                "timeout": timeout_ms,
                "maxJobsToActivate": max_jobs,
                "requestTimeout": request_timeout_ms,
            },
            # The gateway holds the request open for requestTimeout
            timeout_seconds=request_timeout_ms / 1000 + 10,
        )
        return [Job.from_api(item) for item in data.get("jobs", [])]

    async def complete_job(self, job_key: str, variables: Optional[Dict[str, Any]] = None) -> None:
        await self._post(f"/jobs/{job_key}/completion", {"variables": variables or {}})

    async def fail_job(self, job_key: str, retries: int, error_message: str) -> None:
        await self._post(
            f"/jobs/{job_key}/failure",
            {"retries": max(retries, 0), "errorMessage": error_message},
        )

    async def deploy_resource(self, path: str) -> List[Deployment]:
        resource = Path(path)
        if not resource.is_file():
            raise FileNotFoundError(f"BPMN file not found: {path}")

        form = aiohttp.FormData()
        form.add_field(
            "resources",
            resource.read_bytes(),
            filename=resource.name,
            content_type="application/octet-stream",
        )
        data = await self._post("/deployments", form=form)

        deployments = []
        for item in data.get("deployments", []):
            definition = item.get("processDefinition")
            if not definition:
                continue
            deployments.append(
                Deployment(
                    process_definition_key=str(definition.get("processDefinitionKey")),
                    bpmn_process_id=definition.get("processDefinitionId", ""),
                    version=definition.get("processDefinitionVersion"),
                    resource_name=definition.get("resourceName"),
                )
            )
        return deployments
