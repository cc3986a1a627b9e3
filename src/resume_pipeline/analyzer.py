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
Resume-vs-job analysis pipeline.

  1. Resume text: cached by resume id, else extracted from the PDF
  2. Personal data extraction on the original text
  3. Anonymization of the copy sent to the model
  4. Job description resolution (runs on a worker thread alongside 1-3)
  5. Model analysis
  6. Metadata cache upsert (best effort)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from resume_pipeline.anonymizer import anonymize
from resume_pipeline.errors import UpstreamUnavailableError, ValidationError
from resume_pipeline.job_source import JobSourceResolver
from resume_pipeline.llm_client import ModelOrchestrator
from resume_pipeline.models import (
    AnalysisReport,
    AnalysisRequest,
    AnalysisResult,
    ExtractedPersonalData,
    JobReference,
)
from resume_pipeline.pdf_text import extract_text
from resume_pipeline.personal_data import extract_personal_data
from resume_pipeline.store import ResumeMetadataStore, ResumeTextCache

logger = logging.getLogger(__name__)


class ResumeAnalyzer:
    def __init__(
        self,
        orchestrator: ModelOrchestrator,
        job_resolver: JobSourceResolver,
        metadata_store: Optional[ResumeMetadataStore] = None,
        text_cache: Optional[ResumeTextCache] = None,
    ):
        self.orchestrator = orchestrator
        self.job_resolver = job_resolver
        self.metadata_store = metadata_store
        self.text_cache = text_cache

    def analyze(self, request: AnalysisRequest) -> AnalysisReport:
        request.validate()

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="job-source") as pool:
            job_future = pool.submit(self.job_resolver.resolve, request)

            text = self._resume_text(request)
            extracted = extract_personal_data(text, request.file_name)
            anonymized = anonymize(text)

            job = job_future.result()

        result = self.orchestrator.analyze(anonymized, job)

        kind, value = request.job_source()
        job_ref = JobReference(
            job_id=value if kind == "job_id" else None,
            job_url=value if kind == "job_url" else None,
        )
        metadata_id = self._save_metadata(request, extracted, text, job_ref, result)

        return AnalysisReport(
            result=result,
            extracted_data=extracted,
            job_title=job.title,
            company_name=job.company,
            resume_metadata_id=metadata_id,
        )

    def analyze_with_deadline(self, request: AnalysisRequest, timeout: Optional[float]) -> AnalysisReport:
        """
        Runs analyze() under an overall deadline. The work is not cancelled on
        expiry; the caller just stops waiting for it.
        """
        if not timeout:
            return self.analyze(request)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="analysis")
        try:
            return pool.submit(self.analyze, request).result(timeout=timeout)
        except FutureTimeout as e:
            logger.error(f"Analysis exceeded {timeout}s deadline")
            raise UpstreamUnavailableError(
                "Analysis is taking longer than expected. Please try again later."
            ) from e
        finally:
            pool.shutdown(wait=False)

    def _resume_text(self, request: AnalysisRequest) -> str:
        if request.resume_id and self.text_cache is not None:
            try:
                cached = self.text_cache.get_cached_text(request.resume_id)
            except SQLAlchemyError as e:
                logger.warning(f"Cache lookup failed, will parse PDF: {e}")
                cached = None
            if cached:
                logger.info(f"Using cached parsed text for resume {request.resume_id} ({len(cached)} chars)")
                return cached

        if not request.resume_bytes:
            raise ValidationError("Resume file is required when no cached text is available.")

        text = extract_text(request.resume_bytes)

        if request.resume_id and self.text_cache is not None:
            try:
                self.text_cache.backfill_parsed_text(request.resume_id, text)
            except SQLAlchemyError as e:
                logger.warning(f"Backfill failed for resume {request.resume_id}: {e}")
        return text

    def _save_metadata(
        self,
        request: AnalysisRequest,
        extracted: ExtractedPersonalData,
        text: str,
        job_ref: JobReference,
        result: AnalysisResult,
    ) -> Optional[str]:
        if self.metadata_store is None:
            return None
        try:
            return self.metadata_store.upsert_by_email(
                extracted,
                text,
                job_ref,
                result.match_score,
                result.model_used,
                file_name=request.file_name,
                file_size=request.file_size,
                user_id=request.user_id,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to save resume metadata: {e}")
            return None
