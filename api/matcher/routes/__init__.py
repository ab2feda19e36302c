from fastapi import APIRouter, FastAPI

from .admin import router as admin_router
from .matches import router as matches_router
from .people import router as people_router
from .waiting import router as waiting_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(waiting_router, tags=["waiting"])
    app.include_router(people_router, tags=["people"])
    app.include_router(matches_router, tags=["matches"])
    app.include_router(admin_router, tags=["admin"])


__all__ = ["include_modular_routers", "APIRouter"]
