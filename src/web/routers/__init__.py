"""
FastAPI Routers - Modular endpoint organization.

Router modules:
- triggers: document-change events from the hosting platform
- callables: authenticated request/response operations
- notifications: the caller's in-app notification inbox
- health: liveness and readiness probes
"""

from .triggers import router as triggers_router
from .callables import router as callables_router
from .notifications import router as notifications_router
from .health import router as health_router

__all__ = [
    "triggers_router",
    "callables_router",
    "notifications_router",
    "health_router",
]
