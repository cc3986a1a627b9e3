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
import shutil
import tempfile
import unittest
from pathlib import Path

from resume_pipeline.errors import NotFoundError
from resume_pipeline.templates import TemplateCatalog


class TestBundledTemplates(unittest.TestCase):
    def setUp(self):
        self.catalog = TemplateCatalog()

    def test_all_designs_load_in_order(self):
        slugs = [t.slug for t in self.catalog.list()]
        self.assertEqual(slugs, ["classic", "modern", "minimal", "executive", "ats-optimized", "tech"])

    def test_modern_is_two_column(self):
        modern = self.catalog.require("modern")
        self.assertEqual(modern.default_config["layout"], "two-column")
        self.assertIn("{{SIDEBAR_SECTIONS_HTML}}", modern.html)
        self.assertIn("{{MAIN_SECTIONS_HTML}}", modern.html)

    def test_every_template_has_styles_and_name(self):
        for template in self.catalog.list():
            self.assertIn("{{STYLES}}", template.html, template.slug)
            self.assertIn("{{FULL_NAME}}", template.html, template.slug)
            self.assertTrue(template.css, template.slug)

    def test_unknown_slug(self):
        self.assertIsNone(self.catalog.get("nope"))
        with self.assertRaises(NotFoundError):
            self.catalog.require("nope")


class TestTemplateDirectory(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _write(self, name, data):
        (self.test_dir / name).write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")

    def test_new_file_adds_design(self):
        self._write("plain.json", {"slug": "plain", "name": "Plain", "html": "<p>{{FULL_NAME}}</p>"})
        catalog = TemplateCatalog(self.test_dir)
        plain = catalog.require("plain")
        self.assertEqual(plain.category, "professional")
        self.assertEqual(plain.default_config, {})

    def test_bad_files_skipped(self):
        self._write("broken.json", "{not json")
        self._write("nameless.json", {"slug": "nameless", "html": "<p></p>"})
        self._write("ok.json", {"slug": "ok", "name": "OK", "html": "<p></p>"})
        catalog = TemplateCatalog(self.test_dir)
        self.assertEqual([t.slug for t in catalog.list()], ["ok"])

    def test_cache_cleared(self):
        catalog = TemplateCatalog(self.test_dir)
        self.assertEqual(catalog.list(), [])
        self._write("late.json", {"slug": "late", "name": "Late", "html": "<p></p>"})
        catalog.clear_cache()
        self.assertIsNotNone(catalog.get("late"))


if __name__ == '__main__':
    unittest.main()
