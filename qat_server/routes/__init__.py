from .compile import router as compile_router
from .proxy import router as proxy_router

__all__ = ["compile_router", "proxy_router"]
