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
Persistence owned by the pipeline: the resume metadata cache, parsed resume
text, and resume-builder projects with their sections.
"""

import uuid
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, func, select
from sqlalchemy.orm import relationship, sessionmaker

from resume_pipeline.database import Base, session_scope
from resume_pipeline.models import (
    ExtractedPersonalData,
    JobReference,
    PersonalInfo,
    ResumeProject,
    ResumeSection,
)

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResumeMetadataRecord(Base):
    """
    One row per distinct resume email. Created on the first analysis, then
    refreshed by every later analysis of a resume carrying the same email.
    """
    __tablename__ = "resume_metadata"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=True, index=True)

    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)

    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    mobile = Column(String(100), nullable=True)
    linkedin = Column(String(255), nullable=True)
    github = Column(String(255), nullable=True)
    portfolio = Column(String(255), nullable=True)
    date_of_birth = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    skills = Column(Text, nullable=True)
    parsed_text = Column(Text, nullable=True)

    last_job_id = Column(String(64), nullable=True)
    last_job_url = Column(String(2048), nullable=True)
    last_match_score = Column(Integer, nullable=True)
    analysis_count = Column(Integer, default=1, nullable=False)
    model_used = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
    last_analyzed_at = Column(DateTime(timezone=True), default=_utcnow)


class ResumeDocument(Base):
    """An uploaded resume file; parsed_text caches its extracted text."""
    __tablename__ = "resume_documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=True, index=True)
    file_name = Column(String(255), nullable=True)
    parsed_text = Column(Text, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class ResumeProjectRecord(Base):
    __tablename__ = "resume_projects"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    template_slug = Column(String(100), nullable=False)
    title = Column(String(255), nullable=False, default="Untitled Resume")
    status = Column(String(20), nullable=False, default="draft")
    target_job_title = Column(String(255), nullable=True)
    target_job_description = Column(Text, nullable=True)
    custom_config = Column(JSON, nullable=True)
    personal_info = Column(JSON, nullable=True)
    summary = Column(Text, nullable=True)
    match_score = Column(Integer, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    sections = relationship(
        "ResumeSectionRecord",
        back_populates="project",
        order_by="ResumeSectionRecord.sort_order",
        cascade="all, delete-orphan",
    )


class ResumeSectionRecord(Base):
    __tablename__ = "resume_sections"

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(String(36), ForeignKey("resume_projects.id"), nullable=False, index=True)
    section_type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    items = Column(JSON, nullable=False, default=list)
    sort_order = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    project = relationship("ResumeProjectRecord", back_populates="sections")


# Fields that a later analysis only fills in, never clears
_COALESCED_FIELDS = (
    "full_name", "mobile", "linkedin", "github", "portfolio",
    "date_of_birth", "address", "skills",
)


class ResumeMetadataStore:
    """Resume metadata cache keyed by extracted email."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def upsert_by_email(
        self,
        extracted: ExtractedPersonalData,
        parsed_text: str,
        job_ref: JobReference,
        score: int,
        model: Optional[str],
        file_name: Optional[str] = None,
        file_size: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> str:
        """
        Returns the record id. Without an email there is no dedup key and a
        new record is inserted every time. Concurrent upserts of one email are
        last-writer-wins.
        """
        now = _utcnow()
        with session_scope(self.session_factory) as session:
            record = None
            if extracted.email:
                record = session.execute(
                    select(ResumeMetadataRecord)
                    .where(ResumeMetadataRecord.email == extracted.email)
                    .order_by(ResumeMetadataRecord.created_at.desc())
                    .limit(1)
                ).scalar_one_or_none()

            if record is None:
                record = ResumeMetadataRecord(
                    id=_new_id(),
                    email=extracted.email,
                    analysis_count=1,
                    created_at=now,
                    **{name: getattr(extracted, name) for name in _COALESCED_FIELDS},
                )
                record.user_id = user_id
                record.file_name = file_name
                record.file_size = file_size
                session.add(record)
                logger.debug(f"Created resume metadata {record.id}")
            else:
                for name in _COALESCED_FIELDS:
                    value = getattr(extracted, name)
                    if value is not None:
                        setattr(record, name, value)
                if user_id is not None:
                    record.user_id = user_id
                if file_name:
                    record.file_name = file_name
                if file_size:
                    record.file_size = file_size
                record.analysis_count = (record.analysis_count or 1) + 1
                logger.debug(f"Updated resume metadata {record.id}, count: {record.analysis_count}")

            record.parsed_text = (parsed_text or "").strip() or None
            record.last_job_id = job_ref.job_id
            record.last_job_url = job_ref.job_url
            record.last_match_score = score
            record.model_used = model
            record.last_analyzed_at = now
            return record.id

    def get(self, record_id: str) -> Optional[ResumeMetadataRecord]:
        with session_scope(self.session_factory) as session:
            return session.get(ResumeMetadataRecord, record_id)

    def find_by_email(self, email: str) -> Optional[ResumeMetadataRecord]:
        with session_scope(self.session_factory) as session:
            return session.execute(
                select(ResumeMetadataRecord)
                .where(ResumeMetadataRecord.email == email.lower())
                .order_by(ResumeMetadataRecord.created_at.desc())
                .limit(1)
            ).scalar_one_or_none()


class ResumeTextCache:
    """Parsed text of previously uploaded resumes, looked up by resume id."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def add_document(self, user_id: Optional[str], file_name: Optional[str], parsed_text: Optional[str] = None) -> str:
        with session_scope(self.session_factory) as session:
            document = ResumeDocument(id=_new_id(), user_id=user_id, file_name=file_name, parsed_text=parsed_text)
            session.add(document)
            return document.id

    def get_cached_text(self, resume_id: str) -> Optional[str]:
        with session_scope(self.session_factory) as session:
            document = session.get(ResumeDocument, resume_id)
            if document is None or document.is_deleted:
                return None
            text = document.parsed_text
            return text if text and text.strip() else None

    def backfill_parsed_text(self, resume_id: str, parsed_text: str) -> bool:
        """Stores text for a resume uploaded before parsing-at-upload existed. Never overwrites."""
        with session_scope(self.session_factory) as session:
            document = session.get(ResumeDocument, resume_id)
            if document is None or document.parsed_text is not None:
                return False
            document.parsed_text = parsed_text
            logger.info(f"Backfilled parsed text for resume {resume_id}")
            return True


DEFAULT_SECTIONS = (
    ("experience", "Work Experience"),
    ("education", "Education"),
    ("skills", "Skills"),
    ("projects", "Projects"),
    ("certifications", "Certifications"),
)

_PROJECT_FIELDS = {
    "title", "template_slug", "status", "target_job_title", "target_job_description",
    "custom_config", "personal_info", "summary", "match_score",
}
_SECTION_FIELDS = {"title", "items", "sort_order", "is_visible"}


def _to_section(record: ResumeSectionRecord) -> ResumeSection:
    return ResumeSection(
        id=record.id,
        section_type=record.section_type,
        title=record.title,
        items=list(record.items or []),
        sort_order=record.sort_order,
        is_visible=bool(record.is_visible),
    )


def _to_project(record: ResumeProjectRecord) -> ResumeProject:
    return ResumeProject(
        id=record.id,
        user_id=record.user_id,
        template_slug=record.template_slug,
        title=record.title,
        status=record.status,
        target_job_title=record.target_job_title,
        target_job_description=record.target_job_description,
        custom_config=dict(record.custom_config or {}),
        personal_info=PersonalInfo.from_dict(record.personal_info),
        summary=record.summary or "",
        match_score=record.match_score,
        sections=[_to_section(s) for s in record.sections],
    )


class ProjectStore:
    """Resume-builder projects. All access is scoped to the owning user."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _owned(session, project_id: str, user_id: str) -> Optional[ResumeProjectRecord]:
        return session.execute(
            select(ResumeProjectRecord).where(
                ResumeProjectRecord.id == project_id,
                ResumeProjectRecord.user_id == user_id,
                ResumeProjectRecord.is_deleted.is_(False),
            )
        ).scalar_one_or_none()

    def create_project(
        self,
        user_id: str,
        template_slug: str,
        title: Optional[str] = None,
        target_job_title: Optional[str] = None,
    ) -> ResumeProject:
        with session_scope(self.session_factory) as session:
            record = ResumeProjectRecord(
                id=_new_id(),
                user_id=user_id,
                template_slug=template_slug,
                title=title or "Untitled Resume",
                target_job_title=target_job_title,
                personal_info={},
                custom_config={},
            )
            for order, (section_type, section_title) in enumerate(DEFAULT_SECTIONS, start=1):
                record.sections.append(
                    ResumeSectionRecord(id=_new_id(), section_type=section_type, title=section_title,
                                        items=[], sort_order=order)
                )
            session.add(record)
            session.flush()
            return _to_project(record)

    def list_projects(self, user_id: str) -> List[ResumeProject]:
        with session_scope(self.session_factory) as session:
            records = session.execute(
                select(ResumeProjectRecord)
                .where(ResumeProjectRecord.user_id == user_id, ResumeProjectRecord.is_deleted.is_(False))
                .order_by(ResumeProjectRecord.updated_at.desc())
            ).scalars().all()
            return [_to_project(r) for r in records]

    def get_project(self, project_id: str, user_id: str) -> Optional[ResumeProject]:
        with session_scope(self.session_factory) as session:
            record = self._owned(session, project_id, user_id)
            return _to_project(record) if record else None

    def update_project(self, project_id: str, user_id: str, **fields: Any) -> bool:
        unknown = set(fields) - _PROJECT_FIELDS
        if unknown:
            raise ValueError(f"Unknown project fields: {', '.join(sorted(unknown))}")

        with session_scope(self.session_factory) as session:
            record = self._owned(session, project_id, user_id)
            if record is None:
                return False
            for name, value in fields.items():
                if name == "personal_info" and isinstance(value, PersonalInfo):
                    value = asdict(value)
                setattr(record, name, value)
            record.updated_at = _utcnow()
            return True

    def delete_project(self, project_id: str, user_id: str) -> bool:
        with session_scope(self.session_factory) as session:
            record = self._owned(session, project_id, user_id)
            if record is None:
                return False
            record.is_deleted = True
            record.updated_at = _utcnow()
            return True

    def add_section(
        self,
        project_id: str,
        user_id: str,
        section_type: str,
        title: str,
        sort_order: Optional[int] = None,
        items: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[ResumeSection]:
        with session_scope(self.session_factory) as session:
            project = self._owned(session, project_id, user_id)
            if project is None:
                return None
            if sort_order is None:
                current_max = session.execute(
                    select(func.max(ResumeSectionRecord.sort_order))
                    .where(ResumeSectionRecord.project_id == project_id)
                ).scalar()
                sort_order = (current_max or 0) + 1
            section = ResumeSectionRecord(
                id=_new_id(),
                project_id=project_id,
                section_type=section_type,
                title=title,
                items=list(items or []),
                sort_order=sort_order,
            )
            session.add(section)
            project.updated_at = _utcnow()
            session.flush()
            return _to_section(section)

    def update_section(self, section_id: str, project_id: str, user_id: str, **fields: Any) -> bool:
        unknown = set(fields) - _SECTION_FIELDS
        if unknown:
            raise ValueError(f"Unknown section fields: {', '.join(sorted(unknown))}")

        with session_scope(self.session_factory) as session:
            project = self._owned(session, project_id, user_id)
            if project is None:
                return False
            section = session.get(ResumeSectionRecord, section_id)
            if section is None or section.project_id != project_id:
                return False
            for name, value in fields.items():
                setattr(section, name, list(value) if name == "items" else value)
            project.updated_at = _utcnow()
            return True

    def replace_items(self, project_id: str, section_type: str, items: List[Dict[str, Any]]) -> int:
        """Overwrites the items of every section of a type. Used by auto-fill."""
        with session_scope(self.session_factory) as session:
            sections = session.execute(
                select(ResumeSectionRecord).where(
                    ResumeSectionRecord.project_id == project_id,
                    ResumeSectionRecord.section_type == section_type,
                )
            ).scalars().all()
            for section in sections:
                section.items = list(items)
            return len(sections)

    def delete_section(self, section_id: str, project_id: str, user_id: str) -> bool:
        with session_scope(self.session_factory) as session:
            if self._owned(session, project_id, user_id) is None:
                return False
            section = session.get(ResumeSectionRecord, section_id)
            if section is None or section.project_id != project_id:
                return False
            session.delete(section)
            return True
