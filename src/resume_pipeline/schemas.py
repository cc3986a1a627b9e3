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
Request and response bodies for the HTTP surface.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Resume analyzer
# ============================================================================

class AnalysisJsonBody(BaseModel):
    resume_base64: Optional[str] = None
    resume_filename: Optional[str] = None
    resume_id: Optional[str] = None
    job_id: Optional[str] = None
    job_url: Optional[str] = None
    job_description: Optional[str] = None


# ============================================================================
# Resume builder requests
# ============================================================================

class PersonalInfoSchema(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""

    model_config = ConfigDict(from_attributes=True)


class CreateProjectBody(BaseModel):
    template_slug: str
    title: Optional[str] = None
    target_job_title: Optional[str] = None


class UpdateProjectBody(BaseModel):
    """Only the fields present in the request are applied."""
    title: Optional[str] = None
    template_slug: Optional[str] = None
    personal_info: Optional[PersonalInfoSchema] = None
    summary: Optional[str] = None
    custom_config: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    target_job_title: Optional[str] = None
    target_job_description: Optional[str] = None


class AddSectionBody(BaseModel):
    section_type: str
    title: str
    sort_order: Optional[int] = None


class UpdateSectionBody(BaseModel):
    title: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    sort_order: Optional[int] = None
    is_visible: Optional[bool] = None


class RewriteBulletsBody(BaseModel):
    bullets: List[str] = Field(default_factory=list)
    job_title: str = ""


class AtsCheckBody(BaseModel):
    job_description: str = ""


# ============================================================================
# Resume builder responses
# ============================================================================

class SectionOut(BaseModel):
    id: Optional[str] = None
    section_type: str
    title: str
    items: List[Dict[str, Any]] = Field(default_factory=list)
    sort_order: int = 0
    is_visible: bool = True

    model_config = ConfigDict(from_attributes=True)


class ProjectOut(BaseModel):
    id: Optional[str] = None
    user_id: str
    template_slug: str
    title: str
    personal_info: PersonalInfoSchema
    summary: str = ""
    custom_config: Dict[str, Any] = Field(default_factory=dict)
    sections: List[SectionOut] = Field(default_factory=list)
    status: str = "draft"
    target_job_title: Optional[str] = None
    target_job_description: Optional[str] = None
    match_score: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateOut(BaseModel):
    slug: str
    name: str
    category: str
    description: str = ""
    sort_order: int = 0
    default_config: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class AtsReportOut(BaseModel):
    score: int
    missing_keywords: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
