"""Shared fixtures: fake aiohttp sessions and an in-memory orchestrator."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from deptflow.domain.models import Deployment, Job, ProcessInstance

NOW = datetime(2026, 1, 5, 10, 0, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


def _mock_aiohttp_session(responses, calls):
    """Return a class that replaces aiohttp.ClientSession.

    responses: list of (status, body) tuples or exceptions, consumed in order
    by successive post()/get() calls. Every call is appended to ``calls`` as
    (method, url, kwargs).
    """

    class FakeResponse:
        def __init__(self, status, body):
            self.status = status
            self._body = body if isinstance(body, str) else json.dumps(body)

        async def text(self):
            return self._body

        async def json(self, **kwargs):
            return json.loads(self._body)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, *args, **kwargs):
            self.kwargs = kwargs

        def _request(self, method, url, **kwargs):
            calls.append((method, url, kwargs))
            item = responses.pop(0)
            if isinstance(item, Exception):
                raise item
            status, body = item
            return FakeResponse(status, body)

        def post(self, url, **kwargs):
            return self._request("POST", url, **kwargs)

        def get(self, url, **kwargs):
            return self._request("GET", url, **kwargs)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    return FakeSession


@pytest.fixture
def fake_aiohttp():
    """Factory: fake_aiohttp([(200, {...}), ...]) -> (session_class, calls)."""

    def factory(responses):
        calls: List[tuple] = []
        return _mock_aiohttp_session(list(responses), calls), calls

    return factory


class FakeOrchestrator:
    """In-memory stand-in for CamundaClient."""

    def __init__(self, batches: Optional[List[Any]] = None):
        self.batches = list(batches or [])
        self.completed: List[tuple] = []
        self.failed: List[tuple] = []
        self.started: List[tuple] = []
        self.activations = 0

    async def create_process_instance(self, process_id: str, variables: Optional[Dict[str, Any]] = None):
        self.started.append((process_id, variables))
        return ProcessInstance(
            process_instance_key=str(2251799813685249 + len(self.started)),
            bpmn_process_id=process_id,
            version=1,
        )

    async def activate_jobs(self, task_type, worker, max_jobs=1, timeout_ms=None, request_timeout_ms=None):
        self.activations += 1
        if not self.batches:
            return []
        batch = self.batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch

    async def complete_job(self, job_key, variables=None):
        self.completed.append((job_key, variables))

    async def fail_job(self, job_key, retries, error_message):
        self.failed.append((job_key, retries, error_message))

    async def deploy_resource(self, path):
        return [Deployment(process_definition_key="1", bpmn_process_id="Process")]


@pytest.fixture
def orchestrator():
    return FakeOrchestrator()


def make_job(key="2251799813685300", task_type="evaluate-profitability", variables=None, retries=3):
    return Job(key=key, type=task_type, variables=variables or {}, retries=retries)


@pytest.fixture
def job_factory():
    return make_job


@pytest.fixture
def fake_orchestrator():
    """The FakeOrchestrator class, for tests that script activation batches."""
    return FakeOrchestrator
