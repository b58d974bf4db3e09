"""FastAPI application for the dashboard backend.

Domain errors are mapped to HTTP responses here so endpoints can let them
propagate.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from defi_sim import __version__
from defi_sim.amm import InvalidInput
from defi_sim.api.endpoints import router
from defi_sim.log_config import configure_logging
from defi_sim.pools import InsufficientLiquidity, PoolNotFound, SlippageExceeded

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEFI_SIM_HOST", "127.0.0.1")
PORT = int(os.environ.get("DEFI_SIM_PORT", "8000"))
DEBUG = os.environ.get("DEFI_SIM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="DeFi Dashboard Simulator",
    description="Mock DeFi backend: AMM quotes, pools, farms and faucet",
    version=__version__,
)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    logger.info("invalid_input", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": f"enter a valid amount: {exc}"})


@app.exception_handler(PoolNotFound)
async def pool_not_found_handler(request: Request, exc: PoolNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SlippageExceeded)
@app.exception_handler(InsufficientLiquidity)
async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_conflict", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=409, content={"detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - DEFI_SIM_HOST: Host to bind to (default: 127.0.0.1)
    - DEFI_SIM_PORT: Port to bind to (default: 8000)
    - DEFI_SIM_DEBUG: Enable debug logging and reload mode (default: false)
    - DEFI_SIM_FEE_RATE: Protocol fee rate (default: 0.003)
    """
    configure_logging(logging.DEBUG if DEBUG else logging.INFO)
    uvicorn.run(
        "defi_sim.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
