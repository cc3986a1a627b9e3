# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
HTTP surface: the resume analyzer tool and the resume builder.

User identity arrives in the X-User-Id header; authenticating it is the
job of whatever sits in front of this service.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError as SchemaError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from sqlalchemy.orm import sessionmaker

from resume_pipeline.analyzer import ResumeAnalyzer
from resume_pipeline.builder import ResumeBuilder
from resume_pipeline.config import Settings, get_settings
from resume_pipeline.database import create_engine_from_url, create_session_factory, init_db
from resume_pipeline.errors import PipelineError, ValidationError
from resume_pipeline.external_stores import ProfileStore, SqlJobStore, SqlProfileStore
from resume_pipeline.intake import build_analysis_request, check_pdf_upload, decode_base64_resume
from resume_pipeline.job_source import JobSourceResolver, JobStore
from resume_pipeline.llm_client import ModelOrchestrator
from resume_pipeline.schemas import (
    AddSectionBody,
    AnalysisJsonBody,
    AtsCheckBody,
    AtsReportOut,
    CreateProjectBody,
    ProjectOut,
    RewriteBulletsBody,
    SectionOut,
    TemplateOut,
    UpdateProjectBody,
    UpdateSectionBody,
)
from resume_pipeline.store import ProjectStore, ResumeMetadataStore, ResumeTextCache
from resume_pipeline.templates import TemplateCatalog

logger = logging.getLogger(__name__)


# ============================================================================
# Dependencies
# ============================================================================

def get_analyzer(request: Request) -> ResumeAnalyzer:
    return request.app.state.analyzer


def get_builder(request: Request) -> ResumeBuilder:
    return request.app.state.builder


def optional_user(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    return x_user_id or None


def require_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return x_user_id


# ============================================================================
# Resume analyzer
# ============================================================================

analyzer_router = APIRouter(prefix="/api/tools", tags=["Resume Analyzer"])


async def _read_analysis_request(request: Request, settings: Settings, user_id: Optional[str]):
    """Accepts either multipart form data or a JSON body with base64 resume bytes."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = AnalysisJsonBody.model_validate(await request.json())
        except (json.JSONDecodeError, SchemaError) as e:
            raise ValidationError("Invalid JSON request body.") from e

        resume_bytes = None
        file_name = body.resume_filename
        if body.resume_base64:
            resume_bytes = decode_base64_resume(body.resume_base64)
            file_name = file_name or "resume.pdf"
            # No content type travels with a JSON body; the file name and magic bytes decide
            check_pdf_upload(None, file_name, resume_bytes, settings.max_upload_bytes)
        return build_analysis_request(
            resume_bytes=resume_bytes,
            file_name=file_name,
            resume_id=body.resume_id,
            job_id=body.job_id,
            job_url=body.job_url,
            job_description=body.job_description,
            user_id=user_id,
        )

    form = await request.form()
    upload = form.get("resume")
    resume_bytes = None
    file_name = None
    if isinstance(upload, UploadFile):
        resume_bytes = await upload.read()
        file_name = upload.filename
        if resume_bytes:
            check_pdf_upload(upload.content_type, file_name, resume_bytes, settings.max_upload_bytes)

    def field(name: str) -> Optional[str]:
        value = form.get(name)
        return value if isinstance(value, str) else None

    return build_analysis_request(
        resume_bytes=resume_bytes,
        file_name=file_name,
        resume_id=field("resume_id"),
        job_id=field("job_id"),
        job_url=field("job_url"),
        job_description=field("job_description"),
        user_id=user_id,
    )


@analyzer_router.post("/resume-analyzer")
async def analyze_resume(
    request: Request,
    analyzer: ResumeAnalyzer = Depends(get_analyzer),
    user_id: Optional[str] = Depends(optional_user),
):
    """Scores a resume against a job given by id, URL or pasted text."""
    settings: Settings = request.app.state.settings
    analysis_request = await _read_analysis_request(request, settings, user_id)

    logger.info(
        f"Resume analysis requested ({analysis_request.job_source()[0]}, "
        f"file={analysis_request.file_name}, resume_id={analysis_request.resume_id})"
    )
    # PDF parsing and provider calls block; keep them off the event loop
    report = await run_in_threadpool(
        analyzer.analyze_with_deadline, analysis_request, settings.analysis_timeout
    )
    return {"success": True, "data": report.to_dict()}


# ============================================================================
# Resume builder
# ============================================================================

builder_router = APIRouter(prefix="/api/resume-builder", tags=["Resume Builder"])


@builder_router.get("/templates")
def list_templates(builder: ResumeBuilder = Depends(get_builder)):
    templates = [TemplateOut.model_validate(t).model_dump() for t in builder.list_templates()]
    return {"success": True, "data": templates}


@builder_router.get("/templates/{slug}/preview", response_class=HTMLResponse)
def preview_template(slug: str, builder: ResumeBuilder = Depends(get_builder)):
    return HTMLResponse(builder.preview_template(slug))


@builder_router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(
    body: CreateProjectBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    project = builder.create_project(user_id, body.template_slug, body.title, body.target_job_title)
    return {"success": True, "data": ProjectOut.model_validate(project).model_dump()}


@builder_router.get("/projects")
def list_projects(builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    projects = [ProjectOut.model_validate(p).model_dump() for p in builder.list_projects(user_id)]
    return {"success": True, "data": projects}


@builder_router.get("/projects/{project_id}")
def get_project(project_id: str, builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    project = builder.get_project(project_id, user_id)
    return {"success": True, "data": ProjectOut.model_validate(project).model_dump()}


@builder_router.patch("/projects/{project_id}")
def update_project(
    project_id: str,
    body: UpdateProjectBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError("No fields to update.")
    project = builder.update_project(project_id, user_id, **fields)
    return {"success": True, "data": ProjectOut.model_validate(project).model_dump()}


@builder_router.delete("/projects/{project_id}")
def delete_project(project_id: str, builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    builder.delete_project(project_id, user_id)
    return {"success": True, "message": "Project deleted"}


@builder_router.post("/projects/{project_id}/sections", status_code=status.HTTP_201_CREATED)
def add_section(
    project_id: str,
    body: AddSectionBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    section = builder.add_section(project_id, user_id, body.section_type, body.title, body.sort_order)
    return {"success": True, "data": SectionOut.model_validate(section).model_dump()}


@builder_router.patch("/projects/{project_id}/sections/{section_id}")
def update_section(
    project_id: str,
    section_id: str,
    body: UpdateSectionBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError("No fields to update.")
    project = builder.update_section(section_id, project_id, user_id, **fields)
    return {"success": True, "data": ProjectOut.model_validate(project).model_dump()}


@builder_router.delete("/projects/{project_id}/sections/{section_id}")
def delete_section(
    project_id: str,
    section_id: str,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    builder.delete_section(section_id, project_id, user_id)
    return {"success": True, "message": "Section deleted"}


@builder_router.post("/projects/{project_id}/auto-fill")
def auto_fill(project_id: str, builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    return {"success": True, "data": builder.auto_fill(project_id, user_id)}


@builder_router.post("/projects/{project_id}/ai/summary")
def ai_summary(project_id: str, builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    summary = builder.ai_generate_summary(project_id, user_id)
    return {"success": True, "data": {"summary": summary}}


@builder_router.post("/ai/rewrite-bullets")
def ai_rewrite_bullets(
    body: RewriteBulletsBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    bullets = builder.ai_rewrite_bullets(body.bullets, body.job_title)
    return {"success": True, "data": {"bullets": bullets}}


@builder_router.post("/projects/{project_id}/ai/ats-check")
def ai_ats_check(
    project_id: str,
    body: AtsCheckBody,
    builder: ResumeBuilder = Depends(get_builder),
    user_id: str = Depends(require_user),
):
    report = builder.ai_ats_check(project_id, user_id, body.job_description)
    return {"success": True, "data": AtsReportOut.model_validate(report).model_dump()}


@builder_router.get("/projects/{project_id}/export", response_class=HTMLResponse)
def export_project(project_id: str, builder: ResumeBuilder = Depends(get_builder), user_id: str = Depends(require_user)):
    return HTMLResponse(builder.export_html(project_id, user_id))


# ============================================================================
# Application
# ============================================================================

async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error", "code": "internal_error", "retryable": False},
    )


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    orchestrator: Optional[ModelOrchestrator] = None,
    job_store: Optional[JobStore] = None,
    profile_store: Optional[ProfileStore] = None,
    catalog: Optional[TemplateCatalog] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if session_factory is None:
        engine = create_engine_from_url(settings.database_url)
        init_db(engine)
        session_factory = create_session_factory(engine)

    orchestrator = orchestrator or ModelOrchestrator(settings=settings)
    job_store = job_store or SqlJobStore(session_factory)
    profile_store = profile_store or SqlProfileStore(session_factory)

    app = FastAPI(
        title="Resume Pipeline",
        description="Resume analysis and resume builder API",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.analyzer = ResumeAnalyzer(
        orchestrator,
        JobSourceResolver(job_store=job_store, settings=settings),
        metadata_store=ResumeMetadataStore(session_factory),
        text_cache=ResumeTextCache(session_factory),
    )
    app.state.builder = ResumeBuilder(
        ProjectStore(session_factory),
        catalog or TemplateCatalog(),
        orchestrator,
        profiles=profile_store,
    )

    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(analyzer_router)
    app.include_router(builder_router)
    return app
