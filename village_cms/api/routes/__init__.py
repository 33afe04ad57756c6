"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, constants) lives here; every sub-router
imports what it needs from this package.
"""

import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
if IS_TEST_ENV:
    limiter = Limiter(key_func=get_remote_address)

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()
else:
    limiter = Limiter(key_func=get_remote_address)

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
INVALID_CREDENTIALS_RESPONSE = HTTPException(
    status_code=401, detail="Email or password is incorrect"
)
SLUG_STORAGE_UNAVAILABLE = "Slug lookup is temporarily unavailable, please retry"

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from village_cms.api.routes.articles import router as articles_router
from village_cms.api.routes.galleries import router as galleries_router
from village_cms.api.routes.locations import router as locations_router
from village_cms.api.routes.slider import router as slider_router
from village_cms.api.routes.uploads import router as uploads_router
from village_cms.api.routes.contact import router as contact_router
from village_cms.api.routes.auth import router as auth_router
from village_cms.api.routes.admin import router as admin_router
from village_cms.api.routes.health import router as health_router

router = APIRouter()
router.include_router(articles_router)
router.include_router(galleries_router)
router.include_router(locations_router)
router.include_router(slider_router)
router.include_router(uploads_router)
router.include_router(contact_router)
router.include_router(auth_router)
router.include_router(admin_router)
router.include_router(health_router)
