import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import FetchError, FetchExhaustedError, SupabaseError

logger = logging.getLogger(__name__)


async def supabase_error_handler(_request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error("Supabase error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Datastore error: {exc.message}"},
    )


async def fetch_exhausted_error_handler(
    _request: Request, exc: FetchExhaustedError
) -> JSONResponse:
    logger.error("Fetch exhausted for %s: %s", exc.url, exc.message)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Could not fetch {exc.url}: {exc.message}"},
    )


async def fetch_error_handler(_request: Request, exc: FetchError) -> JSONResponse:
    logger.error("Upstream fetch error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": exc.message},
    )
