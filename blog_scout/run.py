"""CLI entrypoint for running Blog Scout.

Usage examples:

.. code-block:: bash

    python -m blog_scout.run --keyword "robot vacuum" --title "Robot vacuum buying guide" --out outputs/
    python -m blog_scout.run --requests data/requests.csv --out outputs/ --limit 5

This script loads configuration from a YAML file (default ``config/config.yaml``),
builds the providers named in its ``providers`` section, and runs the
collection workflow for one request or a CSV batch of requests. Each report
is written as JSON; a summary CSV and a run manifest are produced for auditing
and offline evaluation.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import ValidationError

from .config import CollectionSettings, load_config, load_settings, provider_options
from .orchestrator import CollectionOrchestrator
from .orchestrator.progress import STAGE_NAMES
from .schemas.models import CollectionReport, CollectionRequest, RunManifest, StageProgress
from .utils.crawler import get_blog_crawler
from .utils.llm_client import get_text_generator
from .utils.logging_setup import setup_logging
from .utils.search_client import get_blog_search_client
from .utils.slugify import slugify
from .utils.video_client import get_subtitle_client, get_video_search_client


logger = logging.getLogger(__name__)

SUMMARY_HEADER = [
    "slug",
    "search_keyword",
    "selected_title",
    "content_type",
    "total_blogs",
    "total_videos",
    "selected_blogs",
    "selected_videos",
    "crawled_success",
    "transcripts",
    "blog_analysis",
    "video_analysis",
    "data_quality",
    "processing_time",
    "selection_fallback",
]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect and analyse reference material for a blog post")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--keyword", type=str, help="Search keyword for a single request")
    source.add_argument("--requests", type=str, help="Path to a CSV file of requests")
    parser.add_argument("--title", type=str, help="Title of the post to be written (single request)")
    parser.add_argument("--main-keyword", type=str, default=None, help="Original main keyword")
    parser.add_argument("--content-type", type=str, default="info", help="info, review, compare or howto")
    parser.add_argument("--review-type", type=str, default=None, help="Review type for review content")
    parser.add_argument("--sub-keywords", type=str, default="", help="Comma-separated secondary keywords")
    parser.add_argument("--config", type=str, default="config/config.yaml", help="Path to YAML config file")
    parser.add_argument("--out", type=str, default="outputs", help="Output directory for files")
    parser.add_argument("--limit", type=int, default=0, help="Maximum number of requests to process (0 = all)")
    args = parser.parse_args(argv)
    if args.keyword and not args.title:
        parser.error("--title is required together with --keyword")
    return args


def read_requests_csv(path: str) -> List[CollectionRequest]:
    """Read a batch of requests. Invalid rows are skipped with a warning."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    requests: List[CollectionRequest] = []
    for index, row in df.iterrows():
        try:
            requests.append(CollectionRequest(
                search_keyword=row.get("search_keyword", ""),
                selected_title=row.get("selected_title", ""),
                main_keyword=row.get("main_keyword") or None,
                content_type=row.get("content_type") or "info",
                review_type=row.get("review_type") or None,
                sub_keywords=row.get("sub_keywords", ""),
            ))
        except ValidationError as exc:
            logger.warning(f"Skipping invalid request row {index}: {dict(row)} (error: {exc})")
    return requests


def request_from_args(args: argparse.Namespace) -> CollectionRequest:
    return CollectionRequest(
        search_keyword=args.keyword,
        selected_title=args.title,
        main_keyword=args.main_keyword,
        content_type=args.content_type,
        review_type=args.review_type,
        sub_keywords=args.sub_keywords,
    )


def build_orchestrator(config: Dict[str, Any], settings: CollectionSettings) -> CollectionOrchestrator:
    """Instantiate providers from the ``providers`` config section."""
    blog_provider, blog_cfg = provider_options(config, "blog_search")
    llm_provider, llm_cfg = provider_options(config, "llm")
    crawler_provider, crawler_cfg = provider_options(config, "crawler")
    video_provider, video_cfg = provider_options(config, "video_search")
    subtitle_provider, subtitle_cfg = provider_options(config, "subtitles")

    blog_search = get_blog_search_client(
        provider=blog_provider,
        client_id=blog_cfg.get("client_id"),
        client_secret=blog_cfg.get("client_secret"),
        rate_limit=int(blog_cfg.get("rate_limit", 60)),
    )
    llm = get_text_generator(
        provider=llm_provider,
        api_key=llm_cfg.get("api_key"),
        model=llm_cfg.get("model"),
        base_url=llm_cfg.get("base_url"),
    )
    crawler = get_blog_crawler(
        provider=crawler_provider,
        request_delay=float(crawler_cfg.get("request_delay", 1.0)),
    )
    video_search = get_video_search_client(video_provider, **video_cfg)
    subtitles = get_subtitle_client(subtitle_provider, **subtitle_cfg)
    return CollectionOrchestrator(blog_search, video_search, llm, crawler, subtitles, settings)


class ProgressLogger:
    """Progress listener that logs every stage whose entry changed."""

    def __init__(self):
        self._previous: Tuple[StageProgress, ...] = ()

    def __call__(self, stages: Tuple[StageProgress, ...]) -> None:
        for index, stage in enumerate(stages):
            if stage.status == "pending":
                continue
            if index < len(self._previous) and self._previous[index] == stage:
                continue
            detail = f" - {stage.message}" if stage.message else ""
            logger.info(f"[{index + 1}/{len(STAGE_NAMES)}] {stage.step_name}: {stage.status}{detail}")
        self._previous = stages


def analysis_status(artifact) -> str:
    """``structured`` or the reason the analysis stayed raw."""
    if artifact.structured is not None:
        return "structured"
    return artifact.result.reason


def summary_row(slug: str, report: CollectionReport) -> List[Any]:
    return [
        slug,
        report.request.search_keyword,
        report.request.selected_title,
        report.request.content_type,
        report.total_blogs_collected,
        report.total_videos_collected,
        len(report.selected_blogs),
        len(report.selected_videos),
        sum(1 for doc in report.crawled_blogs if doc.success),
        len(report.transcripts),
        analysis_status(report.blog_analysis),
        analysis_status(report.video_analysis),
        report.summary.data_quality,
        report.summary.processing_time,
        report.stages[2].message or "",
    ]


def failed_stage(orchestrator: CollectionOrchestrator) -> str:
    errored = [stage.step_name for stage in orchestrator.tracker.snapshot() if stage.status == "error"]
    return errored[-1] if errored else "pipeline"


async def process_all_requests(
    requests: List[CollectionRequest],
    orchestrator: CollectionOrchestrator,
    out_dir: Path,
) -> Tuple[List[List[Any]], RunManifest]:
    """Run every request in turn and write one JSON report per request.

    Returns the summary CSV rows and a run manifest summarizing the execution.
    """
    manifest = RunManifest(total_requests=len(requests))
    rows: List[List[Any]] = []
    reports_dir = out_dir / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)

    unsubscribe = orchestrator.subscribe(ProgressLogger())
    try:
        for request in requests:
            try:
                report = await orchestrator.collect_and_analyze(request)
            except Exception as exc:
                logger.error(f"Request '{request.selected_title}' failed: {exc}")
                manifest.record_error(request.selected_title, failed_stage(orchestrator), str(exc))
                continue

            slug = slugify(f"{request.search_keyword} {request.selected_title}")
            report_path = reports_dir / f"{slug}.json"
            with report_path.open("w", encoding="utf-8") as f:
                f.write(report.model_dump_json(indent=2))
            rows.append(summary_row(slug, report))
            manifest.record_success()
    finally:
        unsubscribe()

    manifest.finish()
    return rows, manifest


def write_csv(file_path: Path, header: List[str], rows: List[List[Any]]) -> None:
    with file_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(args.config)
    settings = load_settings(config)

    # Setup logging
    out_dir = Path(args.out)
    setup_logging(log_dir=str(out_dir))

    if args.requests:
        requests = read_requests_csv(args.requests)
    else:
        requests = [request_from_args(args)]

    # Apply limit if provided
    limit = args.limit if args.limit and args.limit > 0 else len(requests)
    requests = requests[:limit]

    orchestrator = build_orchestrator(config, settings)
    rows, manifest = asyncio.run(process_all_requests(requests, orchestrator, out_dir))

    write_csv(out_dir / "collection_summary.csv", SUMMARY_HEADER, rows)

    manifest_path = out_dir / "run_manifest.json"
    with manifest_path.open("w", encoding="utf-8") as f:
        json.dump(manifest.model_dump(mode="json"), f, indent=2)

    print(f"Processed {manifest.successful} of {manifest.total_requests} requests. Errors: {len(manifest.errors)}")


if __name__ == "__main__":
    main()
