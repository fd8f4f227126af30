from hairlens.web.routers.admin import router as admin_router
from hairlens.web.routers.sessions import router as sessions_router

__all__ = [
    "admin_router",
    "sessions_router",
]
