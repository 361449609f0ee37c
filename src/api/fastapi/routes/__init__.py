from fastapi import APIRouter
from . import health, webhooks

def register_routes(router: APIRouter):
    router.include_router(health.router)
    router.include_router(webhooks.router)
