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
Error taxonomy for the resume pipeline.

Every error carries an HTTP-equivalent status, a stable machine-readable code
and whether retrying the whole request later is expected to help. Clients use
these to choose between "try again", "paste the job text" and a hard failure.
"""


class PipelineError(Exception):
    """Base class for all errors surfaced to callers of the pipeline."""

    status_code = 500
    code = "internal_error"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }


class ValidationError(PipelineError):
    """Bad or missing input. Always correctable by the user."""

    status_code = 400
    code = "validation_error"


class ExtractionError(PipelineError):
    """The uploaded PDF has no recoverable text layer."""

    status_code = 422
    code = "extraction_error"


class UnextractableContentError(PipelineError):
    """A job URL was fetched but the posting could not be isolated."""

    status_code = 422
    code = "paste_job_description"


class NotFoundError(PipelineError):
    status_code = 404
    code = "not_found"


class ConfigurationError(PipelineError):
    """Missing or rejected provider credentials. Operator fault."""

    status_code = 500
    code = "configuration_error"


class UpstreamUnavailableError(PipelineError):
    """Transient failure of a provider or fetch service."""

    status_code = 503
    code = "upstream_unavailable"
    retryable = True


class MalformedResponseError(PipelineError):
    """A provider answered but the reply violated the expected shape."""

    status_code = 502
    code = "malformed_response"
