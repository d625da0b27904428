"""Pending task board and WebSocket fan-out for the department dashboards."""

import asyncio
import sys
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket

from deptflow.domain.models import PendingTask
from deptflow.domain.parsing import iso, now_utc


def _log(msg: str):
    print(msg, file=sys.stderr)


class ConnectionManager:
    """Open dashboard sockets; every event goes to all of them."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def send(self, websocket: WebSocket, event: str, data: Any):
        await websocket.send_json({"event": event, "data": data})

    async def broadcast(self, event: str, data: Any):
        for websocket in list(self.active_connections):
            try:
                await self.send(websocket, event, data)
            except Exception as e:
                _log(f"Dropping dashboard connection: {e}")
                self.disconnect(websocket)


class TaskBoard:
    """Jobs forwarded to a dashboard, keyed by job key, until someone completes them."""

    def __init__(self, connections: Optional[ConnectionManager] = None):
        self.connections = connections or ConnectionManager()
        self._tasks: Dict[str, PendingTask] = {}
        self._claimed: Set[str] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, job_key: str) -> Optional[PendingTask]:
        return self._tasks.get(str(job_key))

    def list(self) -> List[Dict[str, Any]]:
        return [task.to_dict() for task in self._tasks.values()]

    async def add(self, job: Any, task_type: str) -> PendingTask:
        task = PendingTask(job=job, task_type=task_type, received_at=iso(now_utc()))
        async with self._lock:
            self._tasks[str(job.key)] = task
        await self.connections.broadcast("new-task", task.to_dict())
        return task

    async def claim(self, job_key: str) -> Optional[PendingTask]:
        """Take a task for completion. None when it is gone or already taken."""
        key = str(job_key)
        async with self._lock:
            if key in self._claimed:
                return None
            task = self._tasks.get(key)
            if task is not None:
                self._claimed.add(key)
            return task

    async def release(self, job_key: str):
        async with self._lock:
            self._claimed.discard(str(job_key))

    async def remove(self, job_key: str, result: Optional[Dict[str, Any]] = None) -> Optional[PendingTask]:
        async with self._lock:
            self._claimed.discard(str(job_key))
            task = self._tasks.pop(str(job_key), None)
        if task is not None:
            await self.connections.broadcast(
                "task-completed",
                {"jobKey": str(job_key), "taskType": task.task_type, "result": result},
            )
        return task
