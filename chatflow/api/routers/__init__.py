"""Router registrations."""

from fastapi import APIRouter

from chatflow.api.routers import chat, health


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(chat.router, tags=["chat"])
    return router
