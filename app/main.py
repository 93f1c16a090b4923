import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import FetchError, FetchExhaustedError, SupabaseError
from app.exceptions.handlers import (
    fetch_error_handler,
    fetch_exhausted_error_handler,
    supabase_error_handler,
)
from app.jobs import JobStore
from app.routers.parser import router as parser_router
from app.services.batch import BatchService
from app.services.casino_parser import CasinoParserService
from app.services.html_fetcher import HtmlFetcher
from app.services.sitemap import SitemapService
from app.services.supabase import SupabaseService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        db = SupabaseService(client, settings.supabase_url, settings.supabase_service_key)
        jobs = JobStore(db)
        fetcher = HtmlFetcher(
            client,
            relay_url=settings.relay_url,
            max_attempts=settings.fetch_max_attempts,
            retry_delay=settings.fetch_retry_delay,
        )
        parser = CasinoParserService(
            db, fetcher, jobs, courtesy_delay=settings.courtesy_delay
        )

        app.state.job_store = jobs
        app.state.html_fetcher = fetcher
        app.state.parser_service = parser
        app.state.batch_service = BatchService(parser, jobs)
        app.state.sitemap_service = SitemapService(client)

        yield


app = FastAPI(title="Casino Parser", lifespan=lifespan)

app.add_exception_handler(SupabaseError, supabase_error_handler)
app.add_exception_handler(FetchExhaustedError, fetch_exhausted_error_handler)
app.add_exception_handler(FetchError, fetch_error_handler)

app.include_router(parser_router)
