from __future__ import annotations

from pydantic import BaseModel

from app.schemas.casino import ParsedCasino
from app.schemas.jobs import JobStatus, ParseLog, ParsingJob


class ParseRequest(BaseModel):
    url: str


class ParseHtmlRequest(BaseModel):
    html: str
    url: str


class BatchRequest(BaseModel):
    urls: list[str]
    source: str = "manual"


class SitemapRequest(BaseModel):
    url: str


class ParseResult(BaseModel):
    success: bool
    casino_id: int | None = None
    parsed_data: ParsedCasino | None = None
    error: str | None = None


class JobSubmittedResponse(BaseModel):
    job_id: int
    status: JobStatus
    message: str


class JobStatusResponse(BaseModel):
    job: ParsingJob
    logs: list[ParseLog] = []


class ActiveJobsResponse(BaseModel):
    active_jobs: list[ParsingJob]


class SitemapResponse(BaseModel):
    urls: list[str]
