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
Strips personally identifying details from the copy of a resume that is sent
to a model provider. The caller keeps the original for caching and auto-fill.
"""

import re

# Applied in order; emails go first so their digits are not read as phones.
SUBSTITUTIONS = [
    (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[EMAIL]"),
    (re.compile(r"(?:\+1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"), "[PHONE]"),
    (re.compile(r"(?:\+91[-.\s]*)?\d{5}[-.\s]*\d{5}"), "[PHONE]"),
    (re.compile(r"\+\d{1,3}[-.\s]*\d{4,14}"), "[PHONE]"),
    (re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[a-zA-Z0-9-]+/?", re.I), "[LINKEDIN]"),
    (re.compile(r"(?:https?://)?(?:www\.)?github\.com/[a-zA-Z0-9-]+/?", re.I), "[GITHUB]"),
    (
        re.compile(
            r"\d+\s+[A-Za-z]+\s+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Court|Ct)"
            r"\.?\s*,?\s*[A-Za-z\s]+,?\s*[A-Z]{2}\s*\d{5}(?:-\d{4})?",
            re.I,
        ),
        "[ADDRESS]",
    ),
]


def anonymize(text: str) -> str:
    for pattern, placeholder in SUBSTITUTIONS:
        text = pattern.sub(placeholder, text)
    return text
