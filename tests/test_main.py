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
from unittest.mock import patch

from resume_pipeline import config, main


PROJECT = {
    "title": "Go CV",
    "template_slug": "classic",
    "personal_info": {"full_name": "Jane Smith", "email": "jane@mail.com"},
    "summary": "Backend engineer",
    "sections": [
        {"type": "skills", "title": "Skills", "items": [{"skills": ["Go", "SQL"]}]},
        {"type": "education", "title": "Education", "items": [{"institution": "MIT"}], "is_visible": False},
    ],
}


class TestParser(unittest.TestCase):
    def test_analyze_needs_one_job_source(self):
        parser = main.build_parser()
        args = parser.parse_args(["-vv", "analyze", "cv.pdf", "--job-url", "https://jobs.example.com/1"])
        self.assertEqual(args.verbose, 2)
        self.assertEqual(args.job_url, "https://jobs.example.com/1")
        self.assertIs(args.func, main.cmd_analyze)

        with patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                parser.parse_args(["analyze", "cv.pdf"])
            with self.assertRaises(SystemExit):
                parser.parse_args(["analyze", "cv.pdf", "--job-id", "1", "--job-description", "Go"])

    def test_command_required(self):
        with patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                main.build_parser().parse_args([])


@patch("resume_pipeline.main.setup_logging")
class TestCommands(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        config._ca_bundle_override = None

    def tearDown(self):
        shutil.rmtree(self.test_dir)
        config._ca_bundle_override = None

    def _project_file(self, data=PROJECT):
        path = self.test_dir / "project.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def test_render_to_file(self, mock_logging):
        output = self.test_dir / "out" / "cv.html"
        main.main(["render", self._project_file(), "-o", str(output)])

        html = output.read_text(encoding="utf-8")
        self.assertIn("Jane Smith", html)
        self.assertIn('<span class="skill-tag">Go</span>', html)
        self.assertNotIn("MIT", html)
        mock_logging.assert_called_once_with(0, quiet=False)

    def test_render_template_override(self, mock_logging):
        output = self.test_dir / "cv.html"
        main.main(["render", self._project_file(), "--template", "modern", "-o", str(output)])
        self.assertIn('class="sidebar-col"', output.read_text(encoding="utf-8"))

    def test_unknown_template_exits_1(self, mock_logging):
        with self.assertRaises(SystemExit) as ctx:
            main.main(["render", self._project_file(), "--template", "nope"])
        self.assertEqual(ctx.exception.code, 1)

    def test_preview(self, mock_logging):
        output = self.test_dir / "preview.html"
        main.main(["preview", "tech", "-o", str(output)])
        self.assertIn("John Doe", output.read_text(encoding="utf-8"))

    def test_analyze_rejects_missing_file(self, mock_logging):
        with self.assertRaises(SystemExit) as ctx:
            main.main(["analyze", str(self.test_dir / "missing.pdf"), "--job-description", "Go"])
        self.assertEqual(ctx.exception.code, 1)

    def test_analyze_rejects_non_pdf(self, mock_logging):
        resume = self.test_dir / "cv.txt"
        resume.write_text("Jane Smith", encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            main.main(["analyze", str(resume), "--job-description", "Go", "--no-cache"])
        self.assertEqual(ctx.exception.code, 1)

    def test_ca_bundle_flag(self, mock_logging):
        with patch("resume_pipeline.main.cmd_templates"):
            main.main(["--ca-bundle", "/corp/ca.pem", "templates"])
        self.assertEqual(config.get_ca_bundle({}), "/corp/ca.pem")

    def test_keyboard_interrupt(self, mock_logging):
        with patch("resume_pipeline.main._main_cli", side_effect=KeyboardInterrupt), patch("sys.stderr"):
            with self.assertRaises(SystemExit) as ctx:
                main.main(["templates"])
        self.assertEqual(ctx.exception.code, 130)


if __name__ == '__main__':
    unittest.main()
