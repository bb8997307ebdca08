"""FastAPI application for the QAT relay server."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .models import HealthResponse
from .routes import compile_router, proxy_router
from .services.compiler import get_compiler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # Startup: resolve the toolchain once and report anything missing
    toolchain = get_compiler().toolchain
    logger.info("QAT relay server started with tool %s", toolchain.tool_path)
    for path in toolchain.missing():
        logger.warning("Toolchain file not found: %s", path)
    yield


app = FastAPI(
    title="QAT Relay Server",
    description="Compiles QIR programs to target-specific bitcode with QAT",
    version="0.1.0",
    lifespan=lifespan,
)

# Browser clients call /proxy cross-origin; preflight is answered here
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(compile_router, tags=["compile"])
app.include_router(proxy_router, tags=["proxy"])


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint; degraded when toolchain files are missing."""
    toolchain = get_compiler().toolchain
    missing = [str(p) for p in toolchain.missing()]
    return HealthResponse(
        status="degraded" if missing else "healthy",
        tool_path=str(toolchain.tool_path),
        missing=missing,
    )


def run():
    """Entry point for qat-server command."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
