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
Heuristic extraction of personal details from raw resume text.

Nothing here touches the network or storage and nothing here raises: every
field is extracted in isolation and a failure leaves that field as None.
Names are resolved by an ordered chain of independent strategies; the first
one that produces a confident answer wins.
"""

import re
import logging
from pathlib import PurePath
from typing import Callable, List, Optional

from resume_pipeline.models import ExtractedPersonalData

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Ordered: explicit country code, India +91, US +1
PHONE_PATTERNS = [
    re.compile(r"\+\d{1,3}[-.\s]*\d{10,14}"),
    re.compile(r"\+91[-.\s]*\d{5}[-.\s]*\d{5}"),
    re.compile(r"\+1[-.\s]*\(?\d{3}\)?[-.\s]*\d{3}[-.\s]*\d{4}"),
]

LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/([a-zA-Z0-9-]+)/?", re.I)
GITHUB_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/([a-zA-Z0-9-]+)/?", re.I)
PORTFOLIO_RE = re.compile(
    r"(?:https?://)?(?:www\.)?([a-zA-Z0-9-]+\.(?:dev|io|me|com|co|tech|site|xyz|portfolio|in|org|net))/?",
    re.I,
)
WEBMAIL_DOMAINS = {
    "gmail.com", "yahoo.com", "outlook.com", "hotmail.com", "live.com",
    "icloud.com", "protonmail.com", "mail.com", "aol.com", "msn.com",
    "rediffmail.com", "ymail.com", "zoho.com", "proton.me",
}

_DOB_LABEL = r"(?:DOB|Date of Birth|D\.O\.B|Born)[\s:]*"
DOB_PATTERNS = [
    re.compile(_DOB_LABEL + r"(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})", re.I),
    re.compile(_DOB_LABEL + r"(\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{2,4})", re.I),
    re.compile(_DOB_LABEL + r"(\w+\s+\d{1,2},?\s+\d{4})", re.I),
]

ADDRESS_RE = re.compile(
    r"\d+\s+[A-Za-z]+\s+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Court|Ct)"
    r"\.?\s*,?\s*[A-Za-z\s]+,?\s*[A-Z]{2}\s*\d{5}(?:-\d{4})?",
    re.I,
)

SKILL_HEADERS = [
    re.compile(r"(?:^|\n)\s*(?:technical\s+)?skills?\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*(?:core\s+)?competenc(?:ies|y)\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*technologies?\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*tech\s+stack\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*expertise\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*proficienc(?:ies|y)\s*[:|\n–-]", re.I),
    re.compile(r"(?:^|\n)\s*tools?\s*(?:&|and)?\s*technologies?\s*[:|\n–-]", re.I),
]

SECTION_END_HEADERS = [
    re.compile(r"(?:^|\n)\s*" + word, re.I)
    for word in (
        r"(?:work\s+)?experience", r"education", r"projects?", r"certifications?",
        r"achievements?", r"awards?", r"publications?", r"references?", r"summary",
        r"objective", r"about\s+me", r"profile", r"employment", r"career",
    )
]

SKILL_STOP_WORDS = {
    "and", "or", "with", "using", "including", "etc", "years", "experience",
    "proficient", "advanced", "intermediate", "beginner", "expert",
}
MAX_SKILLS = 40
SKILLS_WINDOW = 2000

FILENAME_NOISE = {
    "resume", "cv", "curriculum", "vitae", "updated", "final", "new",
    "latest", "draft", "copy",
}
HEADER_WORDS = {"resume", "curriculum", "vitae", "objective", "summary", "profile", "contact", "about"}

NAME_CHARS_RE = re.compile(r"^[A-Za-z\s.'-]+$")


def _title_case(value: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in value.split())


def _has_word(word: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text, re.I) is not None


def _looks_like_name(candidate: str, min_len: int, max_len: int) -> bool:
    words = candidate.split()
    return (
        2 <= len(words) <= 4
        and NAME_CHARS_RE.match(candidate) is not None
        and min_len <= len(candidate) <= max_len
    )


# --- Name strategies ---------------------------------------------------------

def name_from_filename(file_name: Optional[str], text: str) -> Optional[str]:
    """
    Derive a name from the upload's file name, accepted only when the resume
    text backs it up. Guards against files named after something else.
    """
    if not file_name:
        return None

    stem = PurePath(file_name).stem
    stem = re.sub(r"([a-z])([A-Z])", r"\1 \2", stem)
    tokens = [t for t in re.split(r"[-_.\s]+", stem) if t]
    kept = [
        t for t in tokens
        if t.lower() not in FILENAME_NOISE
        and not re.fullmatch(r"v\d+|\(\d+\)|(?:19|20)\d{2}", t, re.I)
    ]
    candidate = " ".join(kept)

    if not 3 <= len(candidate) <= 60 or not re.search(r"[a-zA-Z]{2,}", candidate):
        return None

    parts = [p for p in kept if len(p) >= 2]
    if len(parts) < 2:
        return None

    if candidate.lower() in text.lower():
        return _title_case(candidate)

    if sum(1 for p in parts if _has_word(p, text)) >= 2:
        return _title_case(candidate)

    if _has_word(parts[0], text) and _has_word(parts[-1], text):
        return _title_case(candidate)

    return None


def name_from_leading_words(text: str) -> Optional[str]:
    """A capitalized 2-3 word run at the very top of the document."""
    head = text.strip()[:100]
    match = re.match(r"\s*([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){1,2})", head)
    if not match:
        return None
    candidate = match.group(1).strip()
    if candidate.split()[0].lower() in HEADER_WORDS:
        return None
    if 5 <= len(candidate) <= 50:
        return candidate
    return None


def name_before_email_label(text: str) -> Optional[str]:
    match = re.search(r"([A-Za-z][A-Za-z\s.'-]{3,50}?)\s*(?:Email|E-mail|Mail)\s*[:|]", text, re.I)
    if not match:
        return None
    # The lazy run may swallow earlier lines; the name is the line right above the label.
    lines = [line.strip() for line in match.group(1).splitlines() if line.strip()]
    if not lines:
        return None
    candidate = re.sub(r"\s+", " ", lines[-1])
    if 2 <= len(candidate.split()) <= 4 and NAME_CHARS_RE.match(candidate):
        return candidate
    return None


def name_before_email(text: str, email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    index = text.lower().find(email.lower())
    if index <= 0:
        return None

    window = text[max(0, index - 300):index]
    segments = [s.strip() for s in re.split(r"[\n|]+|\s{3,}", window) if s.strip()]
    rejected = ("email", "contact", "phone", "address", "resume", "objective")
    for segment in reversed(segments[-5:]):
        if any(word in segment.lower() for word in rejected):
            continue
        if _looks_like_name(segment, 5, 60):
            return segment
    return None


def name_from_first_lines(text: str) -> Optional[str]:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:5]:
        lowered = line.lower()
        if any(h in lowered for h in ("resume", "curriculum", "cv", "objective")) or len(line) > 60:
            continue
        if _looks_like_name(line, 5, 50):
            return line
    return None


def extract_name(text: str, file_name: Optional[str] = None, email: Optional[str] = None) -> Optional[str]:
    strategies: List[Callable[[], Optional[str]]] = [
        lambda: name_from_filename(file_name, text),
        lambda: name_from_leading_words(text),
        lambda: name_before_email_label(text),
        lambda: name_before_email(text, email),
        lambda: name_from_first_lines(text),
    ]
    for strategy in strategies:
        name = strategy()
        if name:
            return name
    return None


# --- Field extractors ---------------------------------------------------------

def extract_email(text: str) -> Optional[str]:
    match = EMAIL_RE.search(text)
    return match.group(0).lower() if match else None


def extract_phones(text: str) -> Optional[str]:
    """
    Collects phone numbers written with an explicit country code, normalized to
    digits with a leading '+'. Numbers sharing their last 10 digits are the same
    line; the more qualified form wins. At most two, comma-joined.
    """
    seen = {}
    for pattern in PHONE_PATTERNS:
        for raw in pattern.findall(text):
            normalized = re.sub(r"[^\d+]", "", raw)
            key = normalized[-10:]
            if len(normalized) > len(seen.get(key, "")):
                seen[key] = normalized
    if not seen:
        return None
    return ", ".join(list(seen.values())[:2])


def extract_linkedin(text: str) -> Optional[str]:
    match = LINKEDIN_RE.search(text)
    return f"linkedin.com/in/{match.group(1)}" if match else None


def extract_github(text: str) -> Optional[str]:
    match = GITHUB_RE.search(text)
    return f"github.com/{match.group(1)}" if match else None


def extract_portfolio(text: str) -> Optional[str]:
    for match in PORTFOLIO_RE.finditer(text):
        whole = match.group(0).lower()
        domain = match.group(1).lower()
        # Skip the domain half of an email address
        if match.start() > 0 and text[match.start() - 1] == "@":
            continue
        if "linkedin" in whole or "github" in whole or domain in WEBMAIL_DOMAINS:
            continue
        return re.sub(r"^(?:https?://)?(?:www\.)?", "", match.group(0), flags=re.I)
    return None


def extract_date_of_birth(text: str) -> Optional[str]:
    for pattern in DOB_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def extract_address(text: str) -> Optional[str]:
    match = ADDRESS_RE.search(text)
    return match.group(0).strip() if match else None


def _skills_region(text: str) -> str:
    for header in SKILL_HEADERS:
        match = header.search(text)
        if not match:
            continue
        start = match.end()
        rest = text[start:]
        end = len(rest)
        for end_header in SECTION_END_HEADERS:
            end_match = end_header.search(rest)
            if end_match and end_match.start() < end:
                end = end_match.start()
        return rest[:min(end, SKILLS_WINDOW)].strip()
    return ""


def split_skills(region: str) -> List[str]:
    """Splits a skills block into distinct entries, repairing tokens merged by PDF extraction."""
    region = re.sub(r"([a-z+#])([A-Z])", r"\1, \2", region)
    region = re.sub(r"(\d)([A-Z])", r"\1, \2", region)
    region = re.sub(r"([a-z])(\d)", r"\1, \2", region)
    region = re.sub(r"[•●○◦▪▸►→✓✔★☆|;]", ",", region)
    region = re.sub(r"\n+", ",", region)

    skills: List[str] = []
    seen = set()
    for raw in region.split(","):
        skill = re.sub(r"^\s*[-–—]\s*", "", raw)
        skill = re.sub(r"\s*[-–—]\s*$", "", skill)
        skill = re.sub(r"^\d+\.\s*", "", skill)
        skill = re.sub(r"\s+", " ", skill).strip()

        if not 2 <= len(skill) <= 50:
            continue
        if len(skill.split(" ")) > 5 or skill[-1] in ".!?":
            continue
        if skill.lower() in SKILL_STOP_WORDS or skill.lower() in seen:
            continue
        seen.add(skill.lower())
        skills.append(skill)
    return skills[:MAX_SKILLS]


def extract_skills(text: str) -> Optional[str]:
    region = _skills_region(text)
    if not region:
        return None
    skills = split_skills(region)
    return ", ".join(skills) if skills else None


def _safely(extractor: Callable[..., Optional[str]], *args) -> Optional[str]:
    try:
        return extractor(*args)
    except Exception as e:  # heuristics must never fail the pipeline
        logger.debug(f"{extractor.__name__} failed: {e}")
        return None


def extract_personal_data(text: str, file_name: Optional[str] = None) -> ExtractedPersonalData:
    """
    Best-effort extraction of contact details, links and skills from resume text.
    Never raises; an empty input yields an all-None result.
    """
    text = text or ""
    email = _safely(extract_email, text)
    return ExtractedPersonalData(
        full_name=_safely(extract_name, text, file_name, email),
        email=email,
        mobile=_safely(extract_phones, text),
        linkedin=_safely(extract_linkedin, text),
        github=_safely(extract_github, text),
        portfolio=_safely(extract_portfolio, text),
        date_of_birth=_safely(extract_date_of_birth, text),
        address=_safely(extract_address, text),
        skills=_safely(extract_skills, text),
    )
