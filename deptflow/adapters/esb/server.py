"""Shared FastAPI plumbing for the ESB transform services."""

import json
import sys
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from deptflow.domain.parsing import iso, now_utc


def _log(msg: str):
    print(msg, file=sys.stderr)


class EsbRequest(BaseModel):
    """Base for transform request bodies: every field optional, extras kept."""

    model_config = ConfigDict(extra="allow")


class HealthResponse(BaseModel):
    status: str
    esb: str
    port: int


def envelope(
    esb: str,
    endpoint: str,
    transformed: Dict[str, Any],
    original: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Wrap a transform result the way every ESB endpoint answers."""
    response: Dict[str, Any] = {"success": True}
    if original is not None:
        response["original"] = original
    response["transformed"] = {**transformed, "esb": esb, "endpoint": endpoint}
    print(f"  Response: {json.dumps(response['transformed'], indent=2, default=str)}")
    return response


def declared_fields(request: BaseModel) -> Dict[str, Any]:
    """The declared fields of a request, without any extras the caller sent."""
    return {name: getattr(request, name) for name in type(request).model_fields}


def create_esb_app(esb: str, port: int, router: APIRouter, description: str = "") -> FastAPI:
    app = FastAPI(title=f"{esb} - {description}" if description else esb)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        print(f"[{iso(now_utc())}] {request.method} {request.url.path}")
        body = await request.body()
        if body:
            try:
                print(f"  Request Body: {json.dumps(json.loads(body), indent=2)}")
            except ValueError:
                print(f"  Request Body: {body[:200]!r}")
        try:
            return await call_next(request)
        except Exception as e:
            _log(f"Error in {request.method} {request.url.path}: {e!r}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", esb=esb, port=port)

    app.include_router(router)
    return app
