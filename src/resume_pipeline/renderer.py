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
Renders resume HTML from a data-driven template.

Templates carry an HTML skeleton with {{NAME}} placeholders and their CSS.
Substitution is a single pass over the skeleton, so user data is never
scanned for placeholders. All user text is escaped; skeleton and CSS are
operator content and are inserted as-is.
"""

import re
import html
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from resume_pipeline.models import PersonalInfo, ResumeProject, ResumeSection, Template

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_]+)\}\}")
CONTACT_SEP = '<span class="sep">|</span>'
LINK_SEP = '<span class="sep">·</span>'
SIDEBAR_TYPES = ("skills", "languages")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
SAFE_SCHEMES = ("http", "https", "mailto")

# config key -> (selector, property)
STYLE_OVERRIDES = {
    "font_family": ("body", "font-family"),
    "font_size": ("body", "font-size"),
    "line_height": ("body", "line-height"),
    "primary_color": (".name,.entry-title", "color"),
    "accent_color": (".section-title,.links a", "color"),
}


def escape(value: Any) -> str:
    return html.escape(str(value or ""), quote=True)


def text_list(value: Any) -> List[str]:
    """Bullet-like item fields as strings. A bare string counts as one entry."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple)):
        value = [value]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def safe_href(url: Optional[str]) -> Optional[str]:
    """Escaped href for a user-supplied link, or None when the link is unusable."""
    url = (url or "").strip()
    if not url:
        return None
    scheme = re.match(r"^([a-zA-Z][a-zA-Z0-9+.-]*):", url)
    if scheme:
        if scheme.group(1).lower() not in SAFE_SCHEMES:
            logger.debug(f"Dropping link with unsafe scheme: {scheme.group(1)}")
            return None
    else:
        url = "https://" + url.lstrip("/")
    return escape(url)


def format_date(value: Optional[str]) -> str:
    """YYYY-MM or YYYY-MM-DD as 'Mon YYYY'; anything else passes through."""
    value = (value or "").strip()
    match = re.match(r"^(\d{4})-(\d{2})(?:-\d{2})?", value)
    if match and 1 <= int(match.group(2)) <= 12:
        return f"{MONTHS[int(match.group(2)) - 1]} {match.group(1)}"
    return value


def format_date_range(start: Optional[str], end: Optional[str], current: bool = False) -> str:
    s = format_date(start)
    e = "Present" if current else format_date(end)
    if s and e:
        return f"{s} – {e}"
    return s or e


def _css_value(value: Any) -> str:
    return re.sub(r"[;{}<>\"\\\n\r]", "", str(value)).strip()


def style_overrides(template: Template, config: Dict[str, Any]) -> str:
    """CSS rules for config values that differ from the template's own defaults."""
    rules = []
    for key, (selector, prop) in STYLE_OVERRIDES.items():
        value = config.get(key)
        if value in (None, "") or value == template.default_config.get(key):
            continue
        cleaned = _css_value(value)
        if cleaned:
            rules.append(f"{selector}{{{prop}:{cleaned}}}")
    return "".join(rules)


def _section(title: str, body: str) -> str:
    return f'<section class="section"><h2 class="section-title">{escape(title)}</h2>{body}</section>'


def render_experience(title: str, items: List[Dict[str, Any]]) -> str:
    entries = []
    for item in items:
        company = f'<span class="entry-subtitle"> · {escape(item["company"])}</span>' if item.get("company") else ""
        location = f'<div class="entry-location">{escape(item["location"])}</div>' if item.get("location") else ""
        bullets = text_list(item.get("bullets"))
        bullet_html = (
            '<ul class="bullets">' + "".join(f"<li>{escape(b)}</li>" for b in bullets) + "</ul>" if bullets else ""
        )
        dates = format_date_range(item.get("start_date"), item.get("end_date"), bool(item.get("current")))
        entries.append(
            '<div class="entry"><div class="entry-header"><div>'
            f'<span class="entry-title">{escape(item.get("title"))}</span>{company}</div>'
            f'<span class="entry-date">{escape(dates)}</span></div>{location}{bullet_html}</div>'
        )
    return _section(title, "".join(entries))


def render_education(title: str, items: List[Dict[str, Any]]) -> str:
    entries = []
    for item in items:
        degree = ""
        if item.get("degree"):
            field = f' in {escape(item["field"])}' if item.get("field") else ""
            degree = f'<span class="entry-subtitle"> · {escape(item["degree"])}{field}</span>'
        gpa = f'<div class="entry-location">GPA: {escape(item["gpa"])}</div>' if item.get("gpa") else ""
        entries.append(
            '<div class="entry"><div class="entry-header"><div>'
            f'<span class="entry-title">{escape(item.get("institution"))}</span>{degree}</div>'
            f'<span class="entry-date">{escape(item.get("graduation_year"))}</span></div>{gpa}</div>'
        )
    return _section(title, "".join(entries))


def render_skills(title: str, items: List[Dict[str, Any]]) -> str:
    categories = []
    for item in items:
        name = f'<span class="skill-category-name">{escape(item["category"])}:</span>' if item.get("category") else ""
        tags = "".join(f'<span class="skill-tag">{escape(s)}</span>' for s in text_list(item.get("skills")))
        categories.append(f'<div class="skill-category">{name}<div class="skill-tags">{tags}</div></div>')
    return _section(title, "".join(categories))


def render_projects(title: str, items: List[Dict[str, Any]]) -> str:
    entries = []
    for item in items:
        href = safe_href(item.get("url"))
        link = f'<a href="{href}" class="entry-link">Link ↗</a>' if href else ""
        description = f'<p class="entry-description">{escape(item["description"])}</p>' if item.get("description") else ""
        technologies = text_list(item.get("technologies"))
        tech_html = (
            '<div class="skill-tags">' + "".join(f'<span class="skill-tag">{escape(t)}</span>' for t in technologies) + "</div>"
            if technologies else ""
        )
        entries.append(
            '<div class="entry"><div class="entry-header">'
            f'<span class="entry-title">{escape(item.get("name") or item.get("title"))}</span>{link}</div>'
            f"{description}{tech_html}</div>"
        )
    return _section(title, "".join(entries))


def render_certifications(title: str, items: List[Dict[str, Any]]) -> str:
    entries = []
    for item in items:
        issuer = f'<span class="cert-issuer"> — {escape(item["issuer"])}</span>' if item.get("issuer") else ""
        date = f'<span class="cert-issuer"> ({escape(item["date"])})</span>' if item.get("date") else ""
        entries.append(
            f'<div class="cert-entry"><span class="cert-name">{escape(item.get("cert_name") or item.get("name"))}</span>'
            f"{issuer}{date}</div>"
        )
    return _section(title, "".join(entries))


def render_generic(title: str, items: List[Dict[str, Any]]) -> str:
    entries = []
    for item in items:
        heading = f'<p class="entry-title">{escape(item["title"])}</p>' if item.get("title") else ""
        text = f"<p>{escape(item['text'])}</p>" if item.get("text") else ""
        entries.append(f'<div class="entry">{heading}{text}</div>')
    return _section(title, "".join(entries))


SECTION_RENDERERS: Dict[str, Callable[[str, List[Dict[str, Any]]], str]] = {
    "experience": render_experience,
    "education": render_education,
    "skills": render_skills,
    "projects": render_projects,
    "certifications": render_certifications,
}


def render_section(section: ResumeSection) -> str:
    renderer = SECTION_RENDERERS.get(section.section_type, render_generic)
    return renderer(section.title, section.items)


class TemplateRenderer:
    """Fills a Template's placeholders with resume data."""

    def render(
        self,
        template: Template,
        personal_info: PersonalInfo,
        summary: str,
        sections: Iterable[ResumeSection],
        config: Optional[Dict[str, Any]] = None,
    ) -> str:
        config = config if config is not None else template.effective_config()
        two_column = config.get("layout") == "two-column"

        main_html, sidebar_html = [], []
        visible = sorted((s for s in sections if s.is_visible and s.items), key=lambda s: s.sort_order)
        for section in visible:
            block = render_section(section)
            if two_column and section.section_type in SIDEBAR_TYPES:
                sidebar_html.append(block)
            else:
                main_html.append(block)

        contact = CONTACT_SEP.join(
            escape(part) for part in (personal_info.email, personal_info.phone, personal_info.location) if part
        )
        links = []
        for label, url in (
            ("LinkedIn", personal_info.linkedin),
            ("GitHub", personal_info.github),
            ("Portfolio", personal_info.portfolio),
        ):
            href = safe_href(url)
            if href:
                links.append(f'<a href="{href}">{label}</a>')

        main = "".join(main_html)
        sidebar = "".join(sidebar_html)
        overrides = style_overrides(template, config)
        values = {
            "STYLES": template.css + (f"\n{overrides}" if overrides else ""),
            "TITLE": escape(personal_info.full_name or "Resume"),
            "FULL_NAME": escape(personal_info.full_name or "Your Name"),
            "CONTACT_HTML": contact,
            "LINKS_HTML": LINK_SEP.join(links),
            "SUMMARY_TEXT": escape(summary),
            "SECTIONS_HTML": main + sidebar,
            "MAIN_SECTIONS_HTML": main,
            "SIDEBAR_SECTIONS_HTML": sidebar,
        }
        return PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template.html)

    def render_project(self, project: ResumeProject, template: Template) -> str:
        return self.render(
            template,
            project.personal_info,
            project.summary,
            project.visible_sections(),
            template.effective_config(project.custom_config),
        )

    def render_preview(self, template: Template) -> str:
        """Gallery thumbnail: fixed sample data through the same code path as real exports."""
        return self.render(
            template,
            PREVIEW_PERSONAL_INFO,
            PREVIEW_SUMMARY,
            PREVIEW_SECTIONS,
            template.effective_config(),
        )


PREVIEW_PERSONAL_INFO = PersonalInfo(
    full_name="John Doe",
    email="john.doe@email.com",
    phone="+1 (555) 123-4567",
    location="San Francisco, CA",
    linkedin="linkedin.com/in/johndoe",
    github="github.com/johndoe",
    portfolio="johndoe.dev",
)

PREVIEW_SUMMARY = (
    "Results-driven Full-Stack Engineer with 5+ years of experience building scalable web "
    "applications. Specialized in React, Node.js, and cloud infrastructure. Led development of "
    "platforms serving millions of users with a focus on performance and reliability."
)

PREVIEW_SECTIONS = [
    ResumeSection("experience", "Work Experience", sort_order=1, items=[
        {
            "title": "Senior Software Engineer", "company": "Google", "location": "Mountain View, CA",
            "start_date": "2021-01", "current": True,
            "bullets": [
                "Led development of microservices platform serving 10M+ daily users, reducing latency by 40%",
                "Architected real-time data pipeline processing 5TB/day using Kafka and Apache Spark",
                "Mentored 4 junior engineers, conducted code reviews and established team best practices",
            ],
        },
        {
            "title": "Software Engineer", "company": "Meta", "location": "Menlo Park, CA",
            "start_date": "2019-06", "end_date": "2020-12",
            "bullets": [
                "Built React Native features used by 2B+ monthly active users across iOS and Android",
                "Reduced app crash rate by 35% through systematic debugging and performance optimization",
            ],
        },
    ]),
    ResumeSection("education", "Education", sort_order=2, items=[
        {
            "institution": "Massachusetts Institute of Technology", "degree": "B.S.",
            "field": "Computer Science", "graduation_year": "2019", "gpa": "3.9/4.0",
        },
    ]),
    ResumeSection("skills", "Skills", sort_order=3, items=[
        {
            "category": "Technical Skills",
            "skills": ["React", "Node.js", "TypeScript", "Python", "AWS", "Docker",
                       "PostgreSQL", "GraphQL", "Kubernetes", "Redis"],
        },
    ]),
    ResumeSection("certifications", "Certifications", sort_order=4, items=[
        {"cert_name": "AWS Solutions Architect", "issuer": "Amazon Web Services", "date": "2023"},
    ]),
]
