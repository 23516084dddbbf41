"""API routes."""

from fastapi import APIRouter

from stargazers.api.v1 import auth, events, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/users/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(events.router, prefix="/events", tags=["events"])
