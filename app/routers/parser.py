import logging

import httpx
from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse

from app.dependencies import BatchDep, FetcherDep, JobStoreDep, ParserDep, SitemapDep
from app.schemas.responses import (
    ActiveJobsResponse,
    BatchRequest,
    JobStatusResponse,
    JobSubmittedResponse,
    ParseHtmlRequest,
    ParseRequest,
    ParseResult,
    SitemapRequest,
    SitemapResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


@router.post("/parse", response_model=ParseResult)
async def parse_url(request: ParseRequest, parser: ParserDep) -> ParseResult:
    result = await parser.parse_and_save(request.url)
    if not result.success:
        return JSONResponse(status_code=500, content=result.model_dump(mode="json"))
    return result


@router.post("/parse-html", response_model=ParseResult)
async def parse_html(request: ParseHtmlRequest, parser: ParserDep) -> ParseResult:
    return await parser.parse_and_save_html(request.html, request.url)


@router.post("/parse-batch", response_model=JobSubmittedResponse, status_code=202)
async def parse_batch(request: BatchRequest, batch: BatchDep) -> JobSubmittedResponse:
    urls = [u.strip() for u in request.urls if u.strip()]
    if not urls:
        raise HTTPException(status_code=400, detail="No URLs provided")

    job = await batch.submit(urls, source=request.source)
    return JobSubmittedResponse(
        job_id=job.id,
        status=job.status,
        message=f"Batch job submitted with {len(urls)} URLs",
    )


@router.post("/parse-sitemap", response_model=SitemapResponse)
async def parse_sitemap(request: SitemapRequest, sitemap: SitemapDep) -> SitemapResponse:
    urls = await sitemap.casino_urls(request.url)
    if not urls:
        raise HTTPException(status_code=404, detail="No casino URLs found in sitemap")
    return SitemapResponse(urls=urls)


@router.get("/jobs/active", response_model=ActiveJobsResponse)
async def active_jobs(store: JobStoreDep) -> ActiveJobsResponse:
    return ActiveJobsResponse(active_jobs=await store.list_active())


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: int, store: JobStoreDep) -> JobStatusResponse:
    job = await store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse(job=job, logs=await store.recent_logs(job_id))


@router.get("/proxy")
async def proxy(url: str, fetcher: FetcherDep) -> Response:
    try:
        resp = await fetcher.relay(url)
    except httpx.HTTPError as exc:
        logger.warning("Relay fetch failed for %s: %s", url, exc)
        raise HTTPException(status_code=502, detail=f"Relay fetch failed: {exc}")

    return Response(
        content=resp.content,
        status_code=resp.status_code,
        media_type=resp.headers.get("content-type", "text/html"),
        headers=CORS_HEADERS,
    )
