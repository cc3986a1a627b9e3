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
Resolves the job description an analysis runs against: an internal job id,
an external posting URL (read through a content-extraction reader), or text
pasted by the user.
"""

import re
import logging
from typing import Any, Mapping, Optional, Protocol
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from resume_pipeline.config import Settings, get_settings
from resume_pipeline.errors import (
    NotFoundError,
    UnextractableContentError,
    UpstreamUnavailableError,
    ValidationError,
)
from resume_pipeline.models import AnalysisRequest, JobContent

logger = logging.getLogger(__name__)

MAX_JOB_CHARS = 8000
BLOCK_TAGS = ["p", "div", "li", "br", "tr", "h4", "h5", "h6", "section", "article"]
TRUNCATION_MARKER = "\n...[Content truncated]"
MAX_SYMBOL_RATIO = 0.15
MIN_JOB_KEYWORDS = 3
JOB_KEYWORDS = (
    "experience", "qualifications", "responsibilities", "skills", "requirements",
    "salary", "benefits", "team", "role", "position",
)
FALLBACK_URL_TITLE = "External Job"

PASTE_MESSAGE = (
    "This job site requires the job description to be pasted manually. "
    "Please copy the job details from the website and paste them as the job description."
)

HEADING_RE = re.compile(r"^#\s*(.+)$", re.M)
ROLE_TITLE_RE = re.compile(
    r"\n((?:Senior|Junior|Lead|Staff|Principal|Associate|Mid-Level)?\s*(?:\w+\s+)?"
    r"(?:Software|Backend|Frontend|Full[- ]?Stack|DevOps|Data|ML|AI|Cloud|Platform|Site Reliability|"
    r"Product|Project|Program|Engineering|Design|UX|UI)?\s*"
    r"(?:Engineer|Developer|Manager|Architect|Designer|Analyst|Scientist|Lead|Director|Specialist|"
    r"Consultant|Administrator|Coordinator)[^\n]*)\s*\n={3,}",
    re.I,
)
ROLE_MARKERS = [
    re.compile(r"\n\*\*Working at ", re.I),
    re.compile(r"\n\*\*About the Role", re.I),
    re.compile(r"\n\*\*Job Description", re.I),
    re.compile(r"\n## (?:About|Role|Position|Overview)", re.I),
]
BOILERPLATE_MARKERS = [
    re.compile(r"\n(?:Privacy Policy|Terms of Service|Copyright ©)", re.I),
    re.compile(r"\n### Join the.*(?:Talent Community|Newsletter)", re.I),
    re.compile(r"\n\[.*\]\(https://(?:www\.)?(?:facebook|twitter|linkedin|youtube|instagram)\.com", re.I),
]
# Markers closer to the top than this are navigation, not the posting
MIN_MARKER_OFFSET = 1000
MARKER_BACKUP = 300
MIN_CONTENT_BEFORE_FOOTER = 500


class JobStore(Protocol):
    """Read-only access to the job-listing store."""

    def get_job(self, job_id: str) -> Optional[Mapping[str, Any]]:
        ...


def html_to_reader_text(html: str) -> str:
    """
    Some readers answer with the page HTML instead of text. Reduce it to the
    line-per-block form isolate_posting works on, with h1-h3 written as
    markdown headings so the page title is still found.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    for heading in soup(["h1", "h2", "h3"]):
        heading.replace_with(f"\n# {heading.get_text(' ', strip=True)}\n")
    for block in soup(BLOCK_TAGS):
        block.insert_after("\n")

    lines = (" ".join(line.split()) for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def build_job_description(job: Mapping[str, Any]) -> str:
    """Flattens a job listing into one description block with labelled sub-sections."""
    description = job.get("description") or ""
    if job.get("responsibilities"):
        description += f"\n\nResponsibilities:\n{job['responsibilities']}"
    if job.get("required_education"):
        description += f"\n\nEducation Required: {job['required_education']}"
    if job.get("required_certifications"):
        description += f"\n\nCertifications Required: {job['required_certifications']}"
    if job.get("experience_min") or job.get("experience_max"):
        description += (
            f"\n\nExperience: {job.get('experience_min') or 0}-{job.get('experience_max') or 'N/A'} years"
        )
    if job.get("location"):
        description += f"\n\nLocation: {job['location']}"
    return description


def isolate_posting(content: str) -> JobContent:
    """
    Cuts a job posting out of a reader rendering of the whole page and checks
    the result looks like a job description. Raises UnextractableContentError
    when it does not, so the user can paste the text instead.
    """
    heading = HEADING_RE.search(content)
    title = heading.group(1).strip() if heading else FALLBACK_URL_TITLE

    start = 0
    region_found = False
    role_title = ROLE_TITLE_RE.search(content)
    if role_title:
        start = role_title.start()
        title = role_title.group(1).strip()
        region_found = True
    else:
        for marker in ROLE_MARKERS:
            match = marker.search(content)
            if match and match.start() > MIN_MARKER_OFFSET:
                start = max(0, match.start() - MARKER_BACKUP)
                region_found = True
                break

    end = len(content)
    for marker in BOILERPLATE_MARKERS:
        match = marker.search(content)
        if match and match.start() > start + MIN_CONTENT_BEFORE_FOOTER:
            end = match.start()
            break

    if start > 0 or end < len(content):
        logger.debug(f"Isolated job content from position {start} to {end}")
        content = content[start:end]

    if len(content) > MAX_JOB_CHARS:
        content = content[:MAX_JOB_CHARS] + TRUNCATION_MARKER

    lowered = content.lower()
    keyword_count = sum(1 for kw in JOB_KEYWORDS if kw in lowered)
    symbol_ratio = len(re.findall(r'["{}:,\[\]]', content)) / len(content) if content else 1.0

    if (
        symbol_ratio > MAX_SYMBOL_RATIO
        or keyword_count < MIN_JOB_KEYWORDS
        or (title == FALLBACK_URL_TITLE and not region_found)
    ):
        logger.info(
            f"Job extraction rejected: symbol ratio {symbol_ratio:.2f}, keywords {keyword_count}"
        )
        raise UnextractableContentError(PASTE_MESSAGE)

    return JobContent(title=title, description=content)


class JobSourceResolver:
    """Turns the single job field of an analysis request into JobContent."""

    def __init__(
        self,
        job_store: Optional[JobStore] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.job_store = job_store
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def resolve(self, request: AnalysisRequest) -> JobContent:
        kind, value = request.job_source()
        if kind == "job_id":
            return self.from_job_id(value)
        if kind == "job_url":
            return self.from_url(value)
        return self.from_text(value)

    def from_job_id(self, job_id: str) -> JobContent:
        if self.job_store is None:
            raise NotFoundError("Job not found")
        job = self.job_store.get_job(job_id)
        if not job:
            raise NotFoundError("Job not found")
        return JobContent(
            title=job.get("title") or "Unknown Position",
            description=build_job_description(job),
            company=job.get("company_name") or "Unknown Company",
        )

    def from_url(self, url: str) -> JobContent:
        if not re.match(r"^https?://", url, re.I):
            raise ValidationError("Job URL must start with http:// or https://")

        headers = {"Accept": "text/plain"}
        if self.settings.reader_api_key:
            headers["Authorization"] = f"Bearer {self.settings.reader_api_key}"

        reader_url = self.settings.reader_url + quote(url, safe="!~*'()")
        logger.info(f"Fetching job posting via reader: {url}")
        try:
            response = self.session.get(
                reader_url,
                headers=headers,
                timeout=self.settings.http_timeout,
                verify=self.settings.ca_bundle,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Reader request failed for {url}: {e}")
            raise UpstreamUnavailableError(f"Failed to fetch job from URL: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise UpstreamUnavailableError(f"Failed to fetch job from URL: {response.status_code}")
        if response.status_code >= 400:
            logger.warning(f"Reader returned {response.status_code} for {url}")
            raise UnextractableContentError(PASTE_MESSAGE)

        content = response.text
        if "html" in response.headers.get("Content-Type", "").lower():
            logger.debug(f"Reader returned HTML for {url}; converting to text")
            content = html_to_reader_text(content)

        job = isolate_posting(content)
        logger.info(f'Fetched job: "{job.title}" ({len(job.description)} chars)')
        return job

    def from_text(self, text: str, title: Optional[str] = None) -> JobContent:
        description = text.strip()
        if not description:
            raise ValidationError("Job description is empty.")
        return JobContent(title=title or "Job Description", description=description)
