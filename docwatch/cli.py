"""Run the docwatch tracking pipelines from the command line.

Usage
-----
    python -m docwatch.cli docs --force --output out/updates.md
    python -m docwatch.cli releases --state /var/lib/docwatch

Exit code 0 means the run completed or was skipped by the staleness gate;
1 means configuration was invalid or the run failed.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import os
import sys
from pathlib import Path

from docwatch.github.client import GitHubChangeSource
from docwatch.github.config import GitHubReleaseConfig, GitHubSourceConfig
from docwatch.github.errors import GitHubConfigError
from docwatch.github.releases import GitHubReleaseSource
from docwatch.logging import (
    LOG_LEVEL_ENV,
    configure_logging,
    get_logger,
    log_warning,
)
from docwatch.summary.errors import SummaryError
from docwatch.summary.factory import create_release_summarizer, create_summarizer
from docwatch.tracking.classifier import DocumentLocator
from docwatch.tracking.config import TrackerConfig
from docwatch.tracking.errors import TrackerConfigError
from docwatch.tracking.grouping import GroupingConfig
from docwatch.tracking.pipeline import (
    DocsUpdatePipeline,
    PipelineResult,
    ReleasesPipeline,
)
from docwatch.tracking.render import FilesystemFragmentSink, render_fragment
from docwatch.tracking.store import (
    DOCS_STORE_KEY,
    RELEASES_STORE_KEY,
    JsonFileUpdateStore,
)

logger = get_logger(__name__)

_HEADINGS = {
    "docs": "Documentation updates",
    "releases": "Releases",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docwatch", description=__doc__)
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Log level (defaults to ${LOG_LEVEL_ENV} or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("docs", "Track documentation commits and pull requests"),
        ("releases", "Track published product releases"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--force",
            action="store_true",
            help="Run even when the last fetch is within the freshness interval",
        )
        sub.add_argument(
            "--state",
            type=Path,
            default=None,
            help="Directory of the JSON state documents (overrides DOCWATCH_STATE_DIR)",
        )
        sub.add_argument(
            "--output",
            type=Path,
            default=None,
            help="Markdown file to publish after a successful run",
        )
    return parser


async def _run_docs(config: TrackerConfig, *, force: bool) -> PipelineResult:
    source_config = GitHubSourceConfig.from_env()
    summarizer = create_summarizer()
    source = GitHubChangeSource(source_config)
    try:
        pipeline = DocsUpdatePipeline(
            source,
            JsonFileUpdateStore(config.state_dir, DOCS_STORE_KEY),
            config=config,
            summarizer=summarizer,
            grouping=GroupingConfig.from_env(),
            locator=DocumentLocator(
                docs_root=source_config.docs_root, base_url=config.docs_base_url
            ),
            repo_slug=source_config.slug,
        )
        return await pipeline.run(force=force)
    finally:
        await source.aclose()
        if summarizer is not None and hasattr(summarizer, "aclose"):
            await summarizer.aclose()


async def _run_releases(config: TrackerConfig, *, force: bool) -> PipelineResult:
    release_config = GitHubReleaseConfig.from_env()
    summarizer = create_release_summarizer()
    source = GitHubReleaseSource(release_config)
    try:
        pipeline = ReleasesPipeline(
            source,
            JsonFileUpdateStore(config.state_dir, RELEASES_STORE_KEY),
            config=config,
            summarizer=summarizer,
            repo_slug=f"{release_config.owner}/{release_config.name}",
        )
        return await pipeline.run(force=force)
    finally:
        await source.aclose()
        if summarizer is not None and hasattr(summarizer, "aclose"):
            await summarizer.aclose()


async def _run(command: str, config: TrackerConfig, *, force: bool) -> PipelineResult:
    runner = _run_docs if command == "docs" else _run_releases
    result = await runner(config, force=force)
    if result.ok and config.output_path is not None:
        sink = FilesystemFragmentSink(config.output_path)
        await sink.publish(render_fragment(result.updates, heading=_HEADINGS[command]))
    return result


def _report(command: str, result: PipelineResult) -> None:
    line = (
        f"{command}: {result.status} "
        f"(fetched={result.fetched} added={result.added} "
        f"evicted={result.evicted} retained={result.retained})"
    )
    if result.error is not None:
        line = f"{line}: {result.error}"
    print(line)


def main(argv: list[str] | None = None) -> int:
    """Run one pipeline and report its outcome.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 when the run completed or was skipped, 1 otherwise.

    """
    args = _build_parser().parse_args(argv)
    raw_level = args.log_level or os.environ.get(LOG_LEVEL_ENV)
    level, invalid = configure_logging(raw_level)
    if invalid and raw_level:
        log_warning(logger, "Unknown log level %r; using %s", raw_level, level)

    try:
        config = TrackerConfig.from_env()
        if args.state is not None:
            config = dataclasses.replace(config, state_dir=args.state)
        if args.output is not None:
            config = dataclasses.replace(config, output_path=args.output)
        result = asyncio.run(_run(args.command, config, force=args.force))
    except (GitHubConfigError, TrackerConfigError, SummaryError) as exc:
        print(f"docwatch: configuration error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"docwatch: could not publish output: {exc}", file=sys.stderr)
        return 1

    _report(args.command, result)
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
