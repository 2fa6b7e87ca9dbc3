"""
FastAPI wrapper for Article Authoring.

Exposes the stateless parts of the authoring engine (SEO analysis and slug
formatting) as a REST API. Drafts are never stored server-side.
"""

import logging
from typing import Any, Optional, Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from article_authoring import __version__
from article_authoring.config import AuthoringConfig
from article_authoring.models import normalize_content_document
from article_authoring.seo_analyzer import analyze_seo
from article_authoring.slug_utils import format_as_slug, validate_slug_format

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Article Authoring API",
    description="Live SEO analysis and slug formatting for the article editor",
    version=__version__,
)

# Enable CORS for all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class SeoAnalyzeRequest(BaseModel):
    """Request model for SEO analysis."""
    title: str = Field("", description="Article title")
    small_description: str = Field("", description="Meta (small) description")
    keywords: str = Field("", description="Comma-separated keywords")
    content: Optional[Union[dict[str, Any], str]] = Field(
        None,
        description="Editor content tree, as an object or JSON text",
    )
    extended: bool = Field(False, description="Add heading-quality and explicit-keyword checks")


class SeoCheckModel(BaseModel):
    """Single SEO check result."""
    id: str
    title: str
    description: str
    status: str
    recommendation: str


class SeoReportResponse(BaseModel):
    """Response model for SEO analysis."""
    status: str
    score: int
    pass_count: int
    warning_count: int
    fail_count: int
    checks: list[SeoCheckModel]


class SlugFormatRequest(BaseModel):
    """Request model for slug formatting."""
    text: str = Field(..., description="Raw slug input or a title")
    min_length: int = Field(3, ge=1, description="Minimum slug length")


class SlugFormatResponse(BaseModel):
    """Response model for slug formatting."""
    slug: str
    valid: bool
    error: Optional[str] = None


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
    )


@app.post("/api/seo/analyze", response_model=SeoReportResponse)
async def analyze(request: SeoAnalyzeRequest):
    """Run the SEO checks over an article."""
    config = AuthoringConfig(extended_seo_checks=request.extended)
    report = analyze_seo(
        request.title,
        request.small_description,
        keywords=request.keywords,
        content=normalize_content_document(request.content),
        config=config,
    )
    logger.debug(f"SEO analysis for '{request.title}': {report.status.value}")
    return SeoReportResponse(**report.to_dict())


@app.post("/api/slug/format", response_model=SlugFormatResponse)
async def format_slug(request: SlugFormatRequest):
    """Format text as a slug and validate its format."""
    slug = format_as_slug(request.text)
    error = validate_slug_format(slug, request.min_length)
    return SlugFormatResponse(slug=slug, valid=error is None, error=error)


@app.get("/api/info")
async def api_info():
    """Get API information and usage instructions."""
    return {
        "name": "Article Authoring API",
        "version": __version__,
        "description": "Live SEO analysis and slug formatting for the article editor",
        "endpoints": {
            "GET /api/health": "Health check",
            "POST /api/seo/analyze": "SEO report for a title, description and content tree",
            "POST /api/slug/format": "Canonical slug and format validation",
            "GET /api/info": "This endpoint",
        },
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }
