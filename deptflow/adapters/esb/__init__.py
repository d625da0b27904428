"""ESB transform services and their client."""

from deptflow.adapters.esb.client import ENDPOINT_ROUTES, EsbClient, EsbError, UnknownEndpointError

__all__ = [
    "ENDPOINT_ROUTES",
    "EsbClient",
    "EsbError",
    "UnknownEndpointError",
]
