"""
Server entry point — FastAPI app setup and route configuration.
Exposes the script elements gatherer over HTTP.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator
from typing import Any, Literal

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors
from playwright import async_api

from scriptscope import config
from scriptscope.routes import script_elements
from scriptscope.utils import errors, logger

dotenv.load_dotenv()

log = logger.create_logger("Server")


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start on startup."""
    log.section("ScriptScope Server Started")
    yield


app = fastapi.FastAPI(title="ScriptScope", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================


@app.get("/api/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/api/script-elements")
async def script_elements_endpoint(
    url: str = fastapi.Query(..., description="The URL to load"),
    device: str | None = fastapi.Query(None, description="Device type to emulate"),
    fetch_mode: Literal["series", "parallel"] | None = fastapi.Query(
        None, alias="fetchMode", description="Override the body fetch mode"
    ),
) -> dict[str, Any]:
    """
    Load a page and return its reconciled script artifacts.

    Unknown devices are a client error (400). Pages that fail to load and
    browser or snapshot failures are upstream errors (502). Inline scripts
    that cannot be attributed are reported as 422.
    """
    logger.clear_log_buffer()
    settings = config.get_settings()
    device_type = device or settings.device
    try:
        return await script_elements.gather_script_elements(url, device_type, fetch_mode, settings)
    except errors.UnknownDeviceError as exc:
        raise fastapi.HTTPException(status_code=400, detail=errors.get_error_message(exc)) from exc
    except script_elements.NavigationFailedError as exc:
        log.error("Page load failed", {"url": url, "error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=502, detail=errors.get_error_message(exc)) from exc
    except errors.ConfigurationError as exc:
        log.error("Gather failed", {"url": url, "error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=422, detail=errors.get_error_message(exc)) from exc
    except errors.ScriptElementsError as exc:
        log.error("Gather failed", {"url": url, "error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=502, detail=errors.get_error_message(exc)) from exc
    except async_api.Error as exc:
        log.error("Browser error", {"url": url, "error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=502, detail=errors.get_error_message(exc)) from exc


def run() -> None:
    """Start the API server with uvicorn."""
    settings = config.get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
