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
Plain-text extraction from uploaded PDF resumes.
"""

import io
import logging

from pypdf import PdfReader

from resume_pipeline.errors import ExtractionError

logger = logging.getLogger(__name__)


def extract_text(data: bytes) -> str:
    """
    Extracts text from PDF bytes, one page per block.
    Raises ExtractionError when the document cannot be read or carries no
    text layer (e.g. a scanned image). Never returns an empty string.
    """
    if not data:
        raise ExtractionError("Resume file is empty.")

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.error(f"PDF parsing error: {e}")
        raise ExtractionError(f"Failed to parse PDF: {e}") from e

    text = "\n".join(pages)
    if not text.strip():
        raise ExtractionError(
            "No text content found in PDF. Scanned documents are not supported; "
            "please upload a PDF with selectable text."
        )

    logger.debug(f"Extracted {len(text)} chars from {len(pages)} page(s)")
    return text
