"""deptflow: department workers and ESB services for Camunda 8 retail workflows."""

from deptflow.config import CONFIG, AppConfig, __version__

__all__ = [
    "CONFIG",
    "AppConfig",
    "__version__",
]
