from typing import Annotated

from fastapi import Depends, Request

from app.jobs import JobStore
from app.services.batch import BatchService
from app.services.casino_parser import CasinoParserService
from app.services.html_fetcher import HtmlFetcher
from app.services.sitemap import SitemapService


def get_parser_service(request: Request) -> CasinoParserService:
    return request.app.state.parser_service


def get_batch_service(request: Request) -> BatchService:
    return request.app.state.batch_service


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_sitemap_service(request: Request) -> SitemapService:
    return request.app.state.sitemap_service


def get_html_fetcher(request: Request) -> HtmlFetcher:
    return request.app.state.html_fetcher


ParserDep = Annotated[CasinoParserService, Depends(get_parser_service)]
BatchDep = Annotated[BatchService, Depends(get_batch_service)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
SitemapDep = Annotated[SitemapService, Depends(get_sitemap_service)]
FetcherDep = Annotated[HtmlFetcher, Depends(get_html_fetcher)]
