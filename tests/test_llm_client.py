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

import json
import unittest
from unittest.mock import MagicMock

import httpx
import openai
from google.genai import errors as genai_errors

from resume_pipeline import llm_client
from resume_pipeline.errors import ConfigurationError, MalformedResponseError, UpstreamUnavailableError
from resume_pipeline.llm_client import ModelOrchestrator, ProviderHTTPError
from resume_pipeline.models import JobContent


def make_provider(model, reply=None, error=None, configured=True):
    provider = MagicMock()
    provider.model = model
    provider.configured = configured
    if error is not None:
        provider.complete.side_effect = error
    else:
        provider.complete.return_value = reply
    return provider


ANALYSIS_REPLY = json.dumps({
    "matchScore": 62,
    "missingKeywords": ["Kubernetes"],
    "strengths": ["Go", "SQL"],
    "tips": ["Mention container orchestration"],
    "overallAssessment": "Solid partial match.",
})

JOB = JobContent(title="Senior Go Engineer", description="Requires Go, Kubernetes, SQL")


class TestFallback(unittest.TestCase):
    def test_primary_answers(self):
        primary = make_provider("gemini-2.5-flash", reply="hello")
        secondary = make_provider("llama", reply="unused")
        reply = ModelOrchestrator(primary, secondary).complete("prompt", 0.3, 100)
        self.assertEqual(reply.via, "primary")
        self.assertEqual(reply.model, "gemini-2.5-flash")
        self.assertEqual(reply.text, "hello")
        secondary.complete.assert_not_called()

    def test_rate_limit_falls_back_exactly_once(self):
        primary = make_provider("gemini-2.5-flash", error=ProviderHTTPError("gemini", 429, "quota"))
        secondary = make_provider("llama-3.3-70b-versatile", reply=ANALYSIS_REPLY)
        result = ModelOrchestrator(primary, secondary).analyze("resume", JOB)

        self.assertEqual(primary.complete.call_count, 1)
        self.assertEqual(secondary.complete.call_count, 1)
        self.assertEqual(result.model_used, "llama-3.3-70b-versatile")
        # Same prompt and sampling settings on both providers
        self.assertEqual(primary.complete.call_args, secondary.complete.call_args)

    def test_auth_failure_never_falls_back(self):
        for status in (401, 403):
            primary = make_provider("gemini", error=ProviderHTTPError("gemini", status, "bad key"))
            secondary = make_provider("llama", reply=ANALYSIS_REPLY)
            with self.assertRaises(ConfigurationError) as ctx:
                ModelOrchestrator(primary, secondary).analyze("resume", JOB)
            self.assertFalse(ctx.exception.retryable)
            secondary.complete.assert_not_called()

    def test_server_error_is_transient_without_fallback(self):
        primary = make_provider("gemini", error=ProviderHTTPError("gemini", 503, "overloaded"))
        secondary = make_provider("llama", reply=ANALYSIS_REPLY)
        with self.assertRaises(UpstreamUnavailableError) as ctx:
            ModelOrchestrator(primary, secondary).analyze("resume", JOB)
        self.assertTrue(ctx.exception.retryable)
        secondary.complete.assert_not_called()

    def test_network_failure_is_transient(self):
        primary = make_provider("gemini", error=ProviderHTTPError("gemini", None, "timed out"))
        secondary = make_provider("llama", reply=ANALYSIS_REPLY)
        with self.assertRaises(UpstreamUnavailableError):
            ModelOrchestrator(primary, secondary).complete("p", 0.3, 10)
        secondary.complete.assert_not_called()

    def test_unconfigured_primary(self):
        primary = make_provider("gemini", configured=False)
        with self.assertRaises(ConfigurationError):
            ModelOrchestrator(primary, make_provider("llama")).complete("p", 0.3, 10)
        primary.complete.assert_not_called()

    def test_rate_limit_without_secondary_credentials(self):
        primary = make_provider("gemini", error=ProviderHTTPError("gemini", 429))
        secondary = make_provider("llama", configured=False)
        with self.assertRaises(UpstreamUnavailableError):
            ModelOrchestrator(primary, secondary).complete("p", 0.3, 10)
        secondary.complete.assert_not_called()

    def test_secondary_failure_is_transient(self):
        primary = make_provider("gemini", error=ProviderHTTPError("gemini", 429))
        secondary = make_provider("llama", error=ProviderHTTPError("openai-compatible", 429))
        with self.assertRaises(UpstreamUnavailableError):
            ModelOrchestrator(primary, secondary).complete("p", 0.3, 10)

    def test_empty_reply_is_malformed(self):
        primary = make_provider("gemini", reply="   ")
        with self.assertRaises(MalformedResponseError):
            ModelOrchestrator(primary, make_provider("llama")).complete("p", 0.3, 10)


class TestAnalyze(unittest.TestCase):
    def test_result_fields(self):
        primary = make_provider("gemini-2.5-flash", reply=ANALYSIS_REPLY)
        result = ModelOrchestrator(primary, make_provider("llama")).analyze("[EMAIL] resume", JOB)
        self.assertEqual(result.match_score, 62)
        self.assertEqual(result.missing_keywords, ["Kubernetes"])
        self.assertEqual(result.strengths, ["Go", "SQL"])
        self.assertEqual(result.overall_assessment, "Solid partial match.")
        self.assertEqual(result.model_used, "gemini-2.5-flash")

        prompt, temperature, max_tokens = primary.complete.call_args.args
        self.assertIn("[EMAIL] resume", prompt)
        self.assertIn("Senior Go Engineer", prompt)
        self.assertEqual(temperature, llm_client.ANALYSIS_TEMPERATURE)
        self.assertEqual(max_tokens, llm_client.ANALYSIS_MAX_TOKENS)

    def test_score_is_clamped(self):
        for raw, expected in ((150, 100), (-5, 0), ("87", 87), (None, 0), ("n/a", 0)):
            reply = json.dumps({"matchScore": raw})
            primary = make_provider("gemini", reply=reply)
            result = ModelOrchestrator(primary, make_provider("llama")).analyze("r", JOB)
            self.assertEqual(result.match_score, expected)
            self.assertEqual(result.overall_assessment, "Analysis completed.")

    def test_non_json_reply_is_malformed(self):
        primary = make_provider("gemini", reply="I cannot help with that.")
        with self.assertRaises(MalformedResponseError):
            ModelOrchestrator(primary, make_provider("llama")).analyze("r", JOB)


class TestParseJsonObject(unittest.TestCase):
    def test_code_fence(self):
        self.assertEqual(llm_client.parse_json_object('```json\n{"a": 1}\n```'), {"a": 1})

    def test_leading_chatter(self):
        text = 'Here is the analysis: {"a": {"b": 2}} Hope this helps! {"c": 3}'
        self.assertEqual(llm_client.parse_json_object(text), {"a": {"b": 2}})

    def test_trailing_commas_and_control_chars(self):
        text = '{"a": [1, 2,], "b": "x\x07",}'
        self.assertEqual(llm_client.parse_json_object(text), {"a": [1, 2], "b": "x"})

    def test_array_is_rejected(self):
        with self.assertRaises(MalformedResponseError):
            llm_client.parse_json_object("[1, 2]")

    def test_truncated_object_is_rejected(self):
        with self.assertRaises(MalformedResponseError):
            llm_client.parse_json_object('{"matchScore": 80, "tips": ["a"')


class TestAssists(unittest.TestCase):
    def test_summary_quotes_stripped(self):
        primary = make_provider("gemini", reply='"Seasoned engineer with 8 years in Go."')
        summary = ModelOrchestrator(primary, make_provider("llama")).generate_summary(
            "Jane Smith", "Staff Engineer", "Senior Engineer", "Acme", ["Go"], 3
        )
        self.assertEqual(summary, "Seasoned engineer with 8 years in Go.")
        prompt, temperature, _ = primary.complete.call_args.args
        self.assertIn("Staff Engineer", prompt)
        self.assertEqual(temperature, llm_client.ASSIST_TEMPERATURE)

    def test_rewrite_bullets_json_array(self):
        primary = make_provider("gemini", reply='Sure:\n["Cut latency 40%", "Led 5 engineers"]')
        bullets = ModelOrchestrator(primary, make_provider("llama")).rewrite_bullets(
            ["made things faster", "managed team"], "Engineering Manager"
        )
        self.assertEqual(bullets, ["Cut latency 40%", "Led 5 engineers"])

    def test_rewrite_bullets_line_fallback(self):
        primary = make_provider("gemini", reply="1. Cut latency 40%\n- Led 5 engineers\n\n")
        bullets = ModelOrchestrator(primary, make_provider("llama")).rewrite_bullets(["a", "b"], "EM")
        self.assertEqual(bullets, ["Cut latency 40%", "Led 5 engineers"])

    def test_rewrite_no_bullets_skips_call(self):
        primary = make_provider("gemini", reply="x")
        self.assertEqual(ModelOrchestrator(primary, make_provider("llama")).rewrite_bullets(["", "  "], "EM"), [])
        primary.complete.assert_not_called()

    def test_ats_check(self):
        primary = make_provider("gemini", reply='{"score": 71, "missingKeywords": ["Kafka"], "tips": ["Add metrics"]}')
        report = ModelOrchestrator(primary, make_provider("llama")).ats_check("resume", "jd")
        self.assertEqual(report.score, 71)
        self.assertEqual(report.missing_keywords, ["Kafka"])
        self.assertEqual(report.tips, ["Add metrics"])

    def test_ats_check_fallback_on_bad_reply(self):
        primary = make_provider("gemini", reply="no json here")
        report = ModelOrchestrator(primary, make_provider("llama")).ats_check("resume", "jd")
        self.assertEqual(report.score, 50)
        self.assertEqual(report.missing_keywords, [])
        self.assertEqual(report.tips, [llm_client.ATS_FALLBACK_TIP])
        self.assertTrue(report.is_fallback)


class TestProviders(unittest.TestCase):
    def test_gemini_success(self):
        provider = llm_client.GeminiProvider("key", "gemini-2.5-flash")
        provider._client = MagicMock()
        provider._client.models.generate_content.return_value = MagicMock(text="  answer  ")
        self.assertEqual(provider.complete("p", 0.3, 100), "answer")
        kwargs = provider._client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-2.5-flash")
        self.assertEqual(kwargs["config"].max_output_tokens, 100)

    def test_gemini_api_error_carries_status(self):
        provider = llm_client.GeminiProvider("key", "gemini-2.5-flash")
        provider._client = MagicMock()
        provider._client.models.generate_content.side_effect = genai_errors.APIError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )
        with self.assertRaises(ProviderHTTPError) as ctx:
            provider.complete("p", 0.3, 100)
        self.assertEqual(ctx.exception.status_code, 429)

    def test_gemini_other_error_has_no_status(self):
        provider = llm_client.GeminiProvider("key", "gemini-2.5-flash")
        provider._client = MagicMock()
        provider._client.models.generate_content.side_effect = TimeoutError("slow")
        with self.assertRaises(ProviderHTTPError) as ctx:
            provider.complete("p", 0.3, 100)
        self.assertIsNone(ctx.exception.status_code)

    def test_openai_status_error(self):
        provider = llm_client.OpenAICompatibleProvider("key", "llama", "https://api.groq.test/v1")
        provider._client = MagicMock()
        response = httpx.Response(401, request=httpx.Request("POST", "https://api.groq.test/v1/chat/completions"))
        provider._client.chat.completions.create.side_effect = openai.AuthenticationError(
            "bad key", response=response, body=None
        )
        with self.assertRaises(ProviderHTTPError) as ctx:
            provider.complete("p", 0.3, 100)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_openai_success(self):
        provider = llm_client.OpenAICompatibleProvider("key", "llama")
        provider._client = MagicMock()
        message = MagicMock(content=" hi ")
        provider._client.chat.completions.create.return_value = MagicMock(choices=[MagicMock(message=message)])
        self.assertEqual(provider.complete("p", 0.7, 50), "hi")
        kwargs = provider._client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "p"}])
        self.assertEqual(kwargs["max_tokens"], 50)

    def test_configured(self):
        self.assertFalse(llm_client.GeminiProvider("", "m").configured)
        self.assertTrue(llm_client.OpenAICompatibleProvider("k", "m").configured)


if __name__ == '__main__':
    unittest.main()
