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

import unittest
from unittest.mock import patch

from pypdf.errors import PdfReadError

from pdf_helpers import make_blank_pdf, make_text_pdf
from resume_pipeline.errors import ExtractionError
from resume_pipeline.pdf_text import extract_text


class TestExtractText(unittest.TestCase):
    def test_text_pdf(self):
        data = make_text_pdf(["Jane Smith", "Software Engineer"])
        text = extract_text(data)
        self.assertIn("Jane Smith", text)
        self.assertIn("Software Engineer", text)
        self.assertTrue(text.strip())

    def test_image_only_pdf_raises(self):
        with self.assertRaises(ExtractionError) as ctx:
            extract_text(make_blank_pdf())
        self.assertIn("No text content", ctx.exception.message)

    @patch("resume_pipeline.pdf_text.PdfReader", side_effect=PdfReadError("EOF marker not found"))
    def test_unparseable_pdf_raises(self, mock_reader):
        with self.assertRaises(ExtractionError) as ctx:
            extract_text(b"%PDF-1.4 truncated")
        self.assertEqual(ctx.exception.status_code, 422)
        self.assertIn("Failed to parse PDF", ctx.exception.message)

    def test_empty_bytes_raise(self):
        with self.assertRaises(ExtractionError):
            extract_text(b"")


if __name__ == '__main__':
    unittest.main()
