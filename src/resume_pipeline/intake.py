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
Input checks shared by the HTTP surface and the CLI: PDF upload limits,
base64 resume decoding and request assembly.
"""

import base64
import binascii
import logging
from typing import Optional

from resume_pipeline.errors import ValidationError
from resume_pipeline.models import AnalysisRequest

logger = logging.getLogger(__name__)

PDF_ONLY_MESSAGE = "Only PDF files are supported for resume analysis."
PDF_MAGIC = b"%PDF-"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def decode_base64_resume(payload: str) -> bytes:
    """Decodes a base64 resume, tolerating a data: URL prefix."""
    if not payload or not payload.strip():
        raise ValidationError("Resume file is required. Please upload a PDF file.")

    payload = payload.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid base64 resume data.") from e

    if not data:
        raise ValidationError("Resume file is required. Please upload a PDF file.")
    return data


def check_pdf_upload(
    content_type: Optional[str],
    file_name: Optional[str],
    data: bytes,
    max_bytes: int,
) -> None:
    is_pdf = "pdf" in (content_type or "").lower() or (file_name or "").lower().endswith(".pdf")
    if not is_pdf:
        raise ValidationError(PDF_ONLY_MESSAGE)
    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(f"Resume file is too large. Maximum size is {limit_mb}MB.")
    # Readers tolerate a little junk before the header, so look past byte 0
    if PDF_MAGIC not in data[:1024]:
        logger.info(f"Upload {file_name!r} claims to be a PDF but has no PDF header")
        raise ValidationError(PDF_ONLY_MESSAGE)
    logger.debug(f"Accepted upload {file_name!r} ({len(data)} bytes)")


def build_analysis_request(
    resume_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    resume_id: Optional[str] = None,
    job_id: Optional[str] = None,
    job_url: Optional[str] = None,
    job_description: Optional[str] = None,
    user_id: Optional[str] = None,
) -> AnalysisRequest:
    """Blank form fields arrive as empty strings; they mean "not provided"."""
    request = AnalysisRequest(
        resume_bytes=resume_bytes or None,
        resume_id=_clean(resume_id),
        file_name=_clean(file_name),
        file_size=len(resume_bytes) if resume_bytes else None,
        job_id=_clean(job_id),
        job_url=_clean(job_url),
        job_description=_clean(job_description),
        user_id=_clean(user_id),
    )
    request.validate()
    return request
