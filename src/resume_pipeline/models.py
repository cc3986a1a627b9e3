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
Data models for the resume pipeline.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional, Tuple

from resume_pipeline.errors import ValidationError

SECTION_TYPES = ("experience", "education", "skills", "projects", "certifications", "custom")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass
class AnalysisRequest:
    """
    One resume-vs-job analysis request.
    Needs a resume source (bytes or a cached resume id) and exactly one job source.
    """
    resume_bytes: Optional[bytes] = None
    resume_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    job_id: Optional[str] = None
    job_url: Optional[str] = None
    job_description: Optional[str] = None
    user_id: Optional[str] = None

    def job_source(self) -> Tuple[str, str]:
        """Returns (kind, value) for the single populated job field."""
        sources = [
            (kind, value.strip())
            for kind, value in (
                ("job_id", self.job_id),
                ("job_url", self.job_url),
                ("job_description", self.job_description),
            )
            if not _blank(value)
        ]
        if not sources:
            raise ValidationError("Please provide either a job ID, job URL, or job description.")
        if len(sources) > 1:
            raise ValidationError("Provide only one of job ID, job URL, or job description.")
        return sources[0]

    def validate(self) -> None:
        if not self.resume_bytes and _blank(self.resume_id):
            raise ValidationError("Resume file is required. Please upload a PDF file.")
        self.job_source()


@dataclass
class ExtractedPersonalData:
    """Best-effort personal fields pulled out of raw resume text. Any field may be None."""
    full_name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    skills: Optional[str] = None  # comma-joined

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


@dataclass
class JobContent:
    title: str
    description: str
    company: Optional[str] = None


@dataclass
class JobReference:
    """Which job a resume was last analyzed against."""
    job_id: Optional[str] = None
    job_url: Optional[str] = None


@dataclass
class AnalysisResult:
    match_score: int
    missing_keywords: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    overall_assessment: str = ""
    model_used: str = ""


@dataclass
class AnalysisReport:
    """What the analysis endpoint returns to the client."""
    result: AnalysisResult
    extracted_data: ExtractedPersonalData
    job_title: str = ""
    company_name: Optional[str] = None
    resume_metadata_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self.result)
        data.update(
            job_title=self.job_title,
            company_name=self.company_name,
            resume_metadata_id=self.resume_metadata_id,
            extracted_data=self.extracted_data.to_dict(),
        )
        return data


@dataclass
class ProviderReply:
    """Tagged answer from the model orchestrator: which provider answered and what it said."""
    via: Literal["primary", "secondary"]
    model: str
    text: str


@dataclass
class AtsReport:
    score: int
    missing_keywords: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    is_fallback: bool = False  # the model reply was unusable; placeholder values


@dataclass
class PersonalInfo:
    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PersonalInfo":
        data = data or {}
        return cls(**{k: str(data.get(k) or "") for k in cls.__dataclass_fields__})


@dataclass
class ResumeSection:
    section_type: str
    title: str
    items: List[Dict[str, Any]] = field(default_factory=list)
    sort_order: int = 0
    is_visible: bool = True
    id: Optional[str] = None


@dataclass
class ResumeProject:
    user_id: str
    template_slug: str
    title: str = "Untitled Resume"
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str = ""
    custom_config: Dict[str, Any] = field(default_factory=dict)
    sections: List[ResumeSection] = field(default_factory=list)
    status: str = "draft"
    target_job_title: Optional[str] = None
    target_job_description: Optional[str] = None
    match_score: Optional[int] = None
    id: Optional[str] = None

    def visible_sections(self) -> List[ResumeSection]:
        """Visible sections in sort order."""
        return sorted((s for s in self.sections if s.is_visible), key=lambda s: s.sort_order)

    def section(self, section_type: str) -> Optional[ResumeSection]:
        return next((s for s in self.sections if s.section_type == section_type), None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], user_id: str = "local") -> "ResumeProject":
        """Builds a project from an exported JSON document (as used by the CLI render command)."""
        if not data.get("template_slug"):
            raise ValidationError("Project is missing template_slug.")
        sections = [
            ResumeSection(
                section_type=s.get("section_type") or s.get("type") or "custom",
                title=s.get("title") or "",
                items=list(s.get("items") or []),
                sort_order=int(s.get("sort_order", i)),
                is_visible=bool(s.get("is_visible", True)),
                id=s.get("id"),
            )
            for i, s in enumerate(data.get("sections") or [])
        ]
        return cls(
            user_id=data.get("user_id") or user_id,
            template_slug=data["template_slug"],
            title=data.get("title") or "Untitled Resume",
            personal_info=PersonalInfo.from_dict(data.get("personal_info")),
            summary=data.get("summary") or "",
            custom_config=dict(data.get("custom_config") or {}),
            sections=sections,
            status=data.get("status") or "draft",
            target_job_title=data.get("target_job_title"),
            id=data.get("id"),
        )


@dataclass
class Template:
    """A data-driven resume design: HTML skeleton with {{PLACEHOLDERS}} plus CSS."""
    slug: str
    name: str
    html: str
    css: str = ""
    category: str = "professional"
    description: str = ""
    sort_order: int = 0
    default_config: Dict[str, Any] = field(default_factory=dict)

    def effective_config(self, override: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Template defaults with a per-project override merged on top."""
        return {**self.default_config, **(override or {})}

    def summary_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "sort_order": self.sort_order,
            "default_config": self.default_config,
        }
