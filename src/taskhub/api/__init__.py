"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so no route in a protected router can run
without a valid token. Handlers that need the identity also ask for
it by parameter; FastAPI resolves the dependency once per request.
Health and auth routers are open (no auth required).
"""

from fastapi import APIRouter, Depends

from taskhub.api.auth import router as auth_router
from taskhub.api.health import router as health_router
from taskhub.api.tasks import router as tasks_router
from taskhub.api.users import router as users_router
from taskhub.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid JWT
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
