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
Client for interacting with Large Language Models (LLMs).

Two providers are wired in a fixed order: Google AI Studio (Gemini) is the
primary, and an OpenAI-compatible endpoint (Groq) is called only when the
primary is rate limited. Every reply is tagged with the provider that
produced it.
"""

import re
import json
import math
import logging
from typing import Any, Dict, List, Optional

from resume_pipeline import prompts
from resume_pipeline.config import Settings, configure_ssl_env, get_settings
from resume_pipeline.errors import (
    ConfigurationError,
    MalformedResponseError,
    UpstreamUnavailableError,
)
from resume_pipeline.models import AnalysisResult, AtsReport, JobContent, ProviderReply

# Logger is configured in main.py
logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 8192
ASSIST_TEMPERATURE = 0.7
ASSIST_MAX_TOKENS = 2048

ATS_FALLBACK_TIP = "Could not analyze. Try again."
RATE_LIMITED = 429
AUTH_FAILURES = (401, 403)


class ProviderHTTPError(Exception):
    """A provider call failed. status_code is None when no HTTP response arrived."""

    def __init__(self, provider: str, status_code: Optional[int], detail: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{provider} failed ({status_code}): {detail}")


class GeminiProvider:
    """Google AI Studio via the google-genai SDK."""

    name = "gemini"

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        from google.genai import errors, types

        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=temperature,
                    top_k=40,
                    top_p=0.95,
                    max_output_tokens=max_tokens,
                ),
            )
        except errors.APIError as e:
            raise ProviderHTTPError(self.name, e.code, str(e)) from e
        except Exception as e:
            raise ProviderHTTPError(self.name, None, str(e)) from e
        return (response.text or "").strip()


class OpenAICompatibleProvider:
    """Any chat-completions endpoint speaking the OpenAI protocol (Groq by default)."""

    name = "openai-compatible"

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            import openai
            # The orchestrator owns the retry policy
            self._client = openai.OpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
        return self._client

    def complete(self, prompt: str, temperature: float, max_tokens: int) -> str:
        import openai

        try:
            response = self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIStatusError as e:
            raise ProviderHTTPError(self.name, e.status_code, str(e)) from e
        except openai.APIConnectionError as e:
            raise ProviderHTTPError(self.name, None, str(e)) from e
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Strict decode of a model reply that should be a single JSON object.

    Recovery is limited to: stripping code fences, cutting out the first
    brace-balanced {...} span when there is leading chatter, dropping
    trailing commas and stray control characters. Anything else raises
    MalformedResponseError.
    """
    payload = (text or "").strip()
    payload = re.sub(r"^```(?:json)?\s*", "", payload, flags=re.I)
    payload = re.sub(r"\s*```$", "", payload)
    payload = payload.strip()

    if not payload.startswith("{"):
        start = payload.find("{")
        if start != -1:
            depth = 0
            end = start
            for i in range(start, len(payload)):
                if payload[i] == "{":
                    depth += 1
                elif payload[i] == "}":
                    depth -= 1
                if depth == 0:
                    end = i + 1
                    break
            payload = payload[start:end]

    payload = re.sub(r",(\s*[}\]])", r"\1", payload)
    payload = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F]", "", payload)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse model response: {e}")
        logger.error(f"Response preview: {payload[:500]}")
        raise MalformedResponseError("Failed to parse AI response. Please try again.") from e

    if not isinstance(data, dict):
        logger.error(f"Model response is not a JSON object: {payload[:500]}")
        raise MalformedResponseError("Failed to parse AI response. Please try again.")
    return data


def clamp_score(value: Any) -> int:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(score):
        return 0
    return int(min(100, max(0, round(score))))


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class ModelOrchestrator:
    """
    Calls the primary provider and, on a rate limit only, the secondary.
    Handles prompted requests for resume analysis and the builder assists.
    """

    def __init__(self, primary=None, secondary=None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.primary = primary or GeminiProvider(settings.gemini_api_key, settings.gemini_model)
        if secondary is None:
            secondary = OpenAICompatibleProvider(
                settings.groq_api_key, settings.groq_model, settings.groq_base_url
            )
        self.secondary = secondary

    def complete(self, prompt: str, temperature: float, max_tokens: int) -> ProviderReply:
        if not self.primary.configured:
            raise ConfigurationError("AI service is not configured. Please contact support.")

        # Ensure custom CA bundle is visible to httpx-based SDKs
        configure_ssl_env()

        try:
            text = self.primary.complete(prompt, temperature, max_tokens)
            return self._reply("primary", self.primary.model, text)
        except ProviderHTTPError as e:
            if e.status_code in AUTH_FAILURES:
                logger.error(f"Primary provider rejected credentials: {e}")
                raise ConfigurationError("AI service configuration error. Please contact support.") from e
            if e.status_code != RATE_LIMITED:
                logger.error(f"Primary provider failed: {e}")
                raise UpstreamUnavailableError(
                    "AI service is temporarily unavailable. Please try again later."
                ) from e
            logger.warning(f"Primary provider rate limited, falling back to {self.secondary.model}")

        if not self.secondary.configured:
            raise UpstreamUnavailableError(
                "We're experiencing high demand right now. Please try again shortly."
            )

        try:
            text = self.secondary.complete(prompt, temperature, max_tokens)
        except ProviderHTTPError as e:
            if e.status_code in AUTH_FAILURES:
                logger.error(f"Secondary provider rejected credentials: {e}")
                raise ConfigurationError("AI service configuration error. Please contact support.") from e
            logger.error(f"Secondary provider failed: {e}")
            raise UpstreamUnavailableError(
                "We're experiencing high demand right now. Please try again shortly."
            ) from e
        return self._reply("secondary", self.secondary.model, text)

    @staticmethod
    def _reply(via: str, model: str, text: str) -> ProviderReply:
        if not text or not text.strip():
            raise MalformedResponseError("Empty response from AI")
        return ProviderReply(via=via, model=model, text=text)

    def analyze(self, anonymized_resume: str, job: JobContent) -> AnalysisResult:
        """
        Scores an anonymized resume against a job. Raises ConfigurationError,
        UpstreamUnavailableError or MalformedResponseError.
        """
        prompt = prompts.analysis_prompt(anonymized_resume, job.description, job.title)
        reply = self.complete(prompt, ANALYSIS_TEMPERATURE, ANALYSIS_MAX_TOKENS)
        data = parse_json_object(reply.text)
        logger.info(f"AI: {reply.model} ({reply.via}) | Score: {data.get('matchScore')}")
        return AnalysisResult(
            match_score=clamp_score(data.get("matchScore")),
            missing_keywords=_as_list(data.get("missingKeywords")),
            strengths=_as_list(data.get("strengths")),
            tips=_as_list(data.get("tips")),
            overall_assessment=data.get("overallAssessment") or "Analysis completed.",
            model_used=reply.model,
        )

    def generate_summary(
        self,
        full_name: str,
        target_job_title: Optional[str],
        latest_title: str = "",
        latest_company: str = "",
        skills: Optional[List[str]] = None,
        experience_count: int = 0,
    ) -> str:
        prompt = prompts.summary_prompt(
            full_name, target_job_title, latest_title, latest_company, skills or [], experience_count
        )
        reply = self.complete(prompt, ASSIST_TEMPERATURE, ASSIST_MAX_TOKENS)
        return reply.text.strip().strip('"“”').strip()

    def rewrite_bullets(self, bullets: List[str], job_title: str) -> List[str]:
        bullets = [b for b in bullets if b and b.strip()]
        if not bullets:
            return []

        reply = self.complete(prompts.bullets_prompt(bullets, job_title), ASSIST_TEMPERATURE, ASSIST_MAX_TOKENS)

        match = re.search(r"\[[\s\S]*\]", reply.text)
        if match:
            try:
                parsed = json.loads(match.group(0))
                if isinstance(parsed, list):
                    return [str(b).strip() for b in parsed if str(b).strip()]
            except json.JSONDecodeError:
                logger.debug("Bullet rewrite was not a JSON array; splitting lines instead")

        lines = []
        for line in reply.text.splitlines():
            line = re.sub(r"^\d+\.\s*", "", line.strip())
            line = re.sub(r"^[-•*]\s*", "", line)
            if line:
                lines.append(line)
        return lines

    def ats_check(self, resume_text: str, job_description: str) -> AtsReport:
        reply = self.complete(prompts.ats_prompt(resume_text, job_description), ASSIST_TEMPERATURE, ASSIST_MAX_TOKENS)
        try:
            data = parse_json_object(reply.text)
        except MalformedResponseError:
            return AtsReport(score=50, missing_keywords=[], tips=[ATS_FALLBACK_TIP], is_fallback=True)

        keywords = data.get("missing_keywords", data.get("missingKeywords"))
        return AtsReport(
            score=clamp_score(data.get("score")),
            missing_keywords=_as_list(keywords),
            tips=_as_list(data.get("tips")),
        )
