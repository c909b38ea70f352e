"""API route handlers."""

from .listings import router as listings_router
from .matches import router as matches_router
from .conversations import router as conversations_router
from .notifications import router as notifications_router
from .credits import router as credits_router
