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
Main entry point for the Resume Pipeline CLI.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from resume_pipeline.analyzer import ResumeAnalyzer
from resume_pipeline.config import get_settings, set_ca_bundle_override
from resume_pipeline.database import create_engine_from_url, create_session_factory, init_db
from resume_pipeline.errors import PipelineError, ValidationError
from resume_pipeline.external_stores import SqlJobStore
from resume_pipeline.intake import build_analysis_request, check_pdf_upload
from resume_pipeline.job_source import JobSourceResolver
from resume_pipeline.llm_client import ModelOrchestrator
from resume_pipeline.models import AnalysisReport, ResumeProject
from resume_pipeline.renderer import TemplateRenderer
from resume_pipeline.store import ResumeMetadataStore
from resume_pipeline.templates import TemplateCatalog

logger = logging.getLogger(__name__)

console = Console()

LOG_DIR = Path("user_content/logs")


def setup_logging(verbosity: int, quiet: bool = False):
    """
    Configures logging:
    - File: user_content/logs/resume_pipeline.log (DEBUG)
    - Console: Default=INFO, -q=ERROR, -v=DEBUG, -vvv also shows HTTP client internals
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / "resume_pipeline.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root.addHandler(file_handler)

    if quiet:
        level = logging.ERROR
    elif verbosity >= 1:
        level = logging.DEBUG
    else:
        level = logging.INFO

    console_handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(console_handler)

    # Silence noisy libs if not in super debug
    if verbosity < 3:
        for name in ("httpx", "httpcore", "urllib3", "google_genai", "openai"):
            logging.getLogger(name).setLevel(logging.WARNING)


def _print_report(report: AnalysisReport):
    result = report.result
    console.print(f"[bold]{report.job_title}[/bold]" + (f" at {report.company_name}" if report.company_name else ""))
    console.print(f"Match score: [bold cyan]{result.match_score}[/bold cyan]/100  (model: {result.model_used})")
    console.print(result.overall_assessment)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Strengths")
    table.add_column("Missing keywords")
    table.add_column("Tips")
    rows = max(len(result.strengths), len(result.missing_keywords), len(result.tips))
    for i in range(rows):
        table.add_row(*(
            column[i] if i < len(column) else ""
            for column in (result.strengths, result.missing_keywords, result.tips)
        ))
    console.print(table)

    extracted = {k: v for k, v in report.extracted_data.to_dict().items() if v}
    if extracted:
        console.print("Extracted from resume:")
        for key, value in extracted.items():
            console.print(f"  {key}: {value}")


def _write_or_print(html: str, output: str):
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        logger.info(f"Wrote {path}")
    else:
        sys.stdout.write(html)


def cmd_analyze(args):
    settings = get_settings()
    resume_path = Path(args.resume)
    if not resume_path.is_file():
        raise ValidationError(f"Resume file not found: {resume_path}")
    data = resume_path.read_bytes()
    check_pdf_upload(None, resume_path.name, data, settings.max_upload_bytes)

    job_description = args.job_description
    if args.job_file:
        job_description = Path(args.job_file).read_text(encoding="utf-8")

    request = build_analysis_request(
        resume_bytes=data,
        file_name=resume_path.name,
        job_id=args.job_id,
        job_url=args.job_url,
        job_description=job_description,
    )

    metadata_store = None
    job_store = None
    if args.job_id or not args.no_cache:
        engine = create_engine_from_url(settings.database_url)
        init_db(engine)
        factory = create_session_factory(engine)
        job_store = SqlJobStore(factory)
        if not args.no_cache:
            metadata_store = ResumeMetadataStore(factory)

    analyzer = ResumeAnalyzer(
        ModelOrchestrator(settings=settings),
        JobSourceResolver(job_store=job_store, settings=settings),
        metadata_store=metadata_store,
    )

    logger.info(f"Analyzing {resume_path.name}...")
    report = analyzer.analyze_with_deadline(request, settings.analysis_timeout)

    if args.json:
        console.print_json(json.dumps(report.to_dict()))
    else:
        _print_report(report)


def cmd_render(args):
    with open(args.project, "r", encoding="utf-8") as f:
        project = ResumeProject.from_dict(json.load(f))
    if args.template:
        project.template_slug = args.template

    template = TemplateCatalog().require(project.template_slug)
    logger.info(f"Rendering '{project.title}' with template '{template.slug}'")
    _write_or_print(TemplateRenderer().render_project(project, template), args.output)


def cmd_preview(args):
    template = TemplateCatalog().require(args.slug)
    _write_or_print(TemplateRenderer().render_preview(template), args.output)


def cmd_templates(args):
    table = Table(show_header=True, header_style="bold")
    table.add_column("Slug")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Layout")
    table.add_column("Description")
    for template in TemplateCatalog().list():
        table.add_row(
            template.slug,
            template.name,
            template.category,
            str(template.default_config.get("layout", "")),
            template.description,
        )
    console.print(table)


def cmd_serve(args):
    import uvicorn

    from resume_pipeline.api import create_app

    logger.info(f"Serving on http://{args.host}:{args.port}")
    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resume analysis and resume builder toolkit")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase output verbosity (-v=DEBUG, -vvv=include HTTP clients)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress status output (ERROR only)")
    parser.add_argument("--ca-bundle", help="Path to a custom CA certificate bundle for HTTPS verification (proxy environments)")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Score a PDF resume against a job")
    analyze.add_argument("resume", help="Path to the resume PDF")
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--job-id", help="Job listing id from the jobs table")
    source.add_argument("--job-url", help="URL of an external job posting")
    source.add_argument("--job-description", help="Job description text")
    source.add_argument("--job-file", help="Path to a text file holding the job description")
    analyze.add_argument("--json", action="store_true", help="Print the raw report as JSON")
    analyze.add_argument("--no-cache", action="store_true", help="Do not record the result in the metadata cache")
    analyze.set_defaults(func=cmd_analyze)

    render = sub.add_parser("render", help="Render a resume project JSON file to HTML")
    render.add_argument("project", help="Path to the project JSON")
    render.add_argument("--template", help="Template slug, overriding the project's own")
    render.add_argument("-o", "--output", help="Output HTML file (default: stdout)")
    render.set_defaults(func=cmd_render)

    preview = sub.add_parser("preview", help="Render a template with sample data")
    preview.add_argument("slug", help="Template slug")
    preview.add_argument("-o", "--output", help="Output HTML file (default: stdout)")
    preview.set_defaults(func=cmd_preview)

    templates = sub.add_parser("templates", help="List available templates")
    templates.set_defaults(func=cmd_templates)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None):
    try:
        _main_cli(argv)
    except KeyboardInterrupt:
        # Use stderr so it captures attention even if stdout is redirected
        sys.stderr.write("\n\033[31m[-] Cancelled by user\033[0m\n")
        sys.exit(130)


def _main_cli(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.ca_bundle:
        set_ca_bundle_override(args.ca_bundle)

    setup_logging(args.verbose, quiet=args.quiet)

    try:
        args.func(args)
    except PipelineError as e:
        logger.error(e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
