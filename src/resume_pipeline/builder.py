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
Resume builder: projects and sections, auto-fill from the user's profile,
AI assists (summary, bullet rewriting, ATS check) and HTML export.
"""

import json
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from resume_pipeline.errors import NotFoundError, ValidationError
from resume_pipeline.external_stores import ProfileStore
from resume_pipeline.llm_client import ModelOrchestrator
from resume_pipeline.models import SECTION_TYPES, AtsReport, PersonalInfo, ResumeProject, ResumeSection, Template
from resume_pipeline.renderer import TemplateRenderer, text_list
from resume_pipeline.store import ProjectStore
from resume_pipeline.templates import TemplateCatalog

logger = logging.getLogger(__name__)

# The renderer also routes a languages section to the sidebar
BUILDER_SECTION_TYPES = SECTION_TYPES + ("languages",)
PROJECT_STATUSES = ("draft", "complete")
# Columns that cannot be cleared with an explicit null
REQUIRED_PROJECT_FIELDS = ("title", "template_slug", "status")
REQUIRED_SECTION_FIELDS = ("title", "items", "sort_order", "is_visible")


def _reject_nulls(fields: Mapping[str, Any], required: tuple) -> None:
    cleared = [name for name in required if name in fields and fields[name] is None]
    if cleared:
        raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")


def build_resume_text(project: ResumeProject) -> str:
    """Flattens a project into plain text for the ATS check."""
    info = project.personal_info
    parts = [f"{info.full_name} - {info.email}"]
    if project.summary:
        parts.append(project.summary)

    for section in project.sections:
        parts.append(f"[{section.title}]")
        for item in section.items:
            if item.get("title"):
                parts.append(str(item["title"]))
            if item.get("company"):
                parts.append(str(item["company"]))
            bullets = text_list(item.get("bullets"))
            if bullets:
                parts.append(". ".join(bullets))
            skills = text_list(item.get("skills"))
            if skills:
                parts.append(", ".join(skills))
            if item.get("description"):
                parts.append(str(item["description"]))
            if item.get("cert_name"):
                parts.append(str(item["cert_name"]))
            if item.get("institution"):
                parts.append(f"{item['institution']} {item.get('degree') or ''}".strip())
    return "\n".join(parts)


def _parse_skill_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, list):
            return [str(s).strip() for s in parsed if str(s).strip()]
    except (json.JSONDecodeError, TypeError):
        pass
    return [s.strip() for s in str(raw).split(",") if s.strip()]


def _iso_date(value: Any) -> str:
    if not value:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()[:10]
    return str(value)[:10]


def experience_items(history: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"exp-{i}",
            "title": role.get("job_title") or "",
            "company": role.get("company_name") or "",
            "location": role.get("location") or "",
            "start_date": _iso_date(role.get("start_date")),
            "end_date": _iso_date(role.get("end_date")),
            "current": bool(role.get("is_current")),
            "bullets": [line.strip() for line in (role.get("description") or "").splitlines() if line.strip()],
        }
        for i, role in enumerate(history)
    ]


def certification_items(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Certifications are stored as a JSON array of names or {name, issuer, date} objects."""
    if not raw:
        return []
    try:
        certs = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Profile certifications are not JSON; skipping")
        return []
    if not isinstance(certs, list):
        return []

    items = []
    for i, cert in enumerate(certs):
        if isinstance(cert, dict):
            items.append({
                "id": f"cert-{i}",
                "cert_name": cert.get("name") or cert.get("cert_name") or "",
                "issuer": cert.get("issuer") or "",
                "date": cert.get("date") or "",
            })
        else:
            items.append({"id": f"cert-{i}", "cert_name": str(cert), "issuer": "", "date": ""})
    return items


class ResumeBuilder:
    def __init__(
        self,
        projects: ProjectStore,
        catalog: TemplateCatalog,
        orchestrator: ModelOrchestrator,
        profiles: Optional[ProfileStore] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.projects = projects
        self.catalog = catalog
        self.orchestrator = orchestrator
        self.profiles = profiles
        self.renderer = renderer or TemplateRenderer()

    # --- Templates ---

    def list_templates(self) -> List[Template]:
        return self.catalog.list()

    def preview_template(self, slug: str) -> str:
        return self.renderer.render_preview(self.catalog.require(slug))

    # --- Projects ---

    def create_project(
        self,
        user_id: str,
        template_slug: str,
        title: Optional[str] = None,
        target_job_title: Optional[str] = None,
    ) -> ResumeProject:
        self.catalog.require(template_slug)
        project = self.projects.create_project(user_id, template_slug, title, target_job_title)
        logger.info(f"Created resume project {project.id} for user {user_id}")
        return project

    def list_projects(self, user_id: str) -> List[ResumeProject]:
        return self.projects.list_projects(user_id)

    def get_project(self, project_id: str, user_id: str) -> ResumeProject:
        project = self.projects.get_project(project_id, user_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def update_project(self, project_id: str, user_id: str, **fields: Any) -> ResumeProject:
        _reject_nulls(fields, REQUIRED_PROJECT_FIELDS)
        if fields.get("template_slug"):
            self.catalog.require(fields["template_slug"])
        if fields.get("status") and fields["status"] not in PROJECT_STATUSES:
            raise ValidationError(f"Status must be one of: {', '.join(PROJECT_STATUSES)}")
        if "personal_info" in fields:
            info = fields["personal_info"]
            if not isinstance(info, PersonalInfo):
                info = PersonalInfo.from_dict(info)
            fields["personal_info"] = asdict(info)

        if not self.projects.update_project(project_id, user_id, **fields):
            raise NotFoundError("Project not found")
        return self.get_project(project_id, user_id)

    def delete_project(self, project_id: str, user_id: str) -> None:
        if not self.projects.delete_project(project_id, user_id):
            raise NotFoundError("Project not found")

    # --- Sections ---

    def add_section(
        self,
        project_id: str,
        user_id: str,
        section_type: str,
        title: str,
        sort_order: Optional[int] = None,
    ) -> ResumeSection:
        if section_type not in BUILDER_SECTION_TYPES:
            raise ValidationError(f"Unknown section type: {section_type}")
        if not title or not title.strip():
            raise ValidationError("Section title is required.")
        section = self.projects.add_section(project_id, user_id, section_type, title.strip(), sort_order)
        if section is None:
            raise NotFoundError("Project not found")
        return section

    def update_section(self, section_id: str, project_id: str, user_id: str, **fields: Any) -> ResumeProject:
        _reject_nulls(fields, REQUIRED_SECTION_FIELDS)
        if "items" in fields and not isinstance(fields["items"], list):
            raise ValidationError("Section items must be a list.")
        if not self.projects.update_section(section_id, project_id, user_id, **fields):
            raise NotFoundError("Section not found")
        return self.get_project(project_id, user_id)

    def delete_section(self, section_id: str, project_id: str, user_id: str) -> None:
        if not self.projects.delete_section(section_id, project_id, user_id):
            raise NotFoundError("Section not found")

    # --- Auto-fill ---

    def auto_fill(self, project_id: str, user_id: str) -> Dict[str, Any]:
        """
        Populates a project from the user's profile: personal info, summary,
        experience, skills, education and certifications. Sections with no
        profile data are left untouched.
        """
        self.get_project(project_id, user_id)
        profile = self.profiles.get_profile(user_id) if self.profiles is not None else None
        if not profile:
            raise NotFoundError("User profile not found")

        personal_info = PersonalInfo(
            full_name=f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip(),
            email=profile.get("email") or "",
            phone=profile.get("phone") or "",
            location=profile.get("current_location") or "",
            linkedin=profile.get("linkedin") or "",
            github=profile.get("github") or "",
            portfolio=profile.get("portfolio") or "",
        )
        summary = profile.get("summary") or profile.get("headline") or ""
        self.projects.update_project(project_id, user_id, personal_info=asdict(personal_info), summary=summary)

        filled = []

        experience = experience_items(self.profiles.get_work_history(user_id))
        if experience:
            self.projects.replace_items(project_id, "experience", experience)
            filled.append({"type": "experience", "count": len(experience)})

        skills = _parse_skill_list(profile.get("primary_skills")) + _parse_skill_list(profile.get("secondary_skills"))
        if skills:
            self.projects.replace_items(
                project_id, "skills", [{"id": "skills-0", "category": "Technical Skills", "skills": skills}]
            )
            filled.append({"type": "skills", "count": len(skills)})

        if profile.get("institution") or profile.get("highest_education"):
            self.projects.replace_items(project_id, "education", [{
                "id": "edu-0",
                "institution": profile.get("institution") or "",
                "degree": profile.get("highest_education") or "",
                "field": profile.get("field_of_study") or "",
                "gpa": profile.get("gpa") or "",
                "graduation_year": str(profile.get("graduation_year") or ""),
            }])
            filled.append({"type": "education", "count": 1})

        certifications = certification_items(profile.get("certifications"))
        if certifications:
            self.projects.replace_items(project_id, "certifications", certifications)
            filled.append({"type": "certifications", "count": len(certifications)})

        logger.info(f"Auto-filled project {project_id}: {filled}")
        return {"personal_info": asdict(personal_info), "summary": summary or None, "sections": filled}

    # --- AI assists ---

    def ai_generate_summary(self, project_id: str, user_id: str) -> str:
        project = self.get_project(project_id, user_id)
        experience = project.section("experience")
        roles = experience.items if experience else []
        skills_section = project.section("skills")
        skills = (skills_section.items[0].get("skills") or []) if skills_section and skills_section.items else []
        latest = roles[0] if roles else {}

        summary = self.orchestrator.generate_summary(
            project.personal_info.full_name,
            project.target_job_title,
            latest_title=latest.get("title") or "",
            latest_company=latest.get("company") or "",
            skills=list(skills),
            experience_count=len(roles),
        )
        self.projects.update_project(project_id, user_id, summary=summary)
        return summary

    def ai_rewrite_bullets(self, bullets: List[str], job_title: str) -> List[str]:
        return self.orchestrator.rewrite_bullets(bullets, job_title)

    def ai_ats_check(self, project_id: str, user_id: str, job_description: str) -> AtsReport:
        if not job_description or not job_description.strip():
            raise ValidationError("Job description is required.")
        project = self.get_project(project_id, user_id)
        report = self.orchestrator.ats_check(build_resume_text(project), job_description)

        if not report.is_fallback:
            self.projects.update_project(
                project_id, user_id, match_score=report.score, target_job_description=job_description
            )
        return report

    # --- Export ---

    def export_html(self, project_id: str, user_id: str) -> str:
        project = self.get_project(project_id, user_id)
        template = self.catalog.require(project.template_slug)
        return self.renderer.render_project(project, template)
