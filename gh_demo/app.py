"""gh-demo: hydrate a GitHub repository with demo content, or clean it up.

Usage:
    gh-demo hydrate [--owner OWNER] [--repo REPO] [--config-path DIR] [--clean] [--create-project] [--dry-run]
    gh-demo cleanup [--issues] [--discussions] [--prs] [--labels] [--dry-run]

Example:
    $ export GITHUB_TOKEN=ghp_xxxxxxxxxxxxx
    $ gh-demo hydrate --owner octo --repo demo --clean --preserve-config preserve.json
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from logging import Logger

from gh_demo.libs.config import Config
from gh_demo.libs.content import load_project_config
from gh_demo.libs.exceptions import ItemError, LayeredError, NoApiTokenError, PartialFailureError
from gh_demo.libs.graphql.unified_api import UnifiedGitHubAPI
from gh_demo.libs.orchestrator import CleanupOptions, cleanup, hydrate
from gh_demo.libs.preserve import PreserveConfig, load_preserve_config
from gh_demo.utils.context import OperationContext
from gh_demo.utils.helpers import get_github_token, get_logger_with_params


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--owner", default="", help="Repository owner (defaults to the current gh repository)")
    parser.add_argument("--repo", default="", help="Repository name (defaults to the current gh repository)")
    parser.add_argument(
        "--config-path",
        default=None,
        help="Directory holding the demo content files (default: $GH_DEMO_CONFIG_PATH or .github/demos)",
    )
    parser.add_argument(
        "--preserve-config",
        default=None,
        help="Preserve rules JSON used during cleanup (default: <config-path>/preserve.json)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Log what would change without changing anything")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-demo",
        description="Hydrate a GitHub repository with demo issues, discussions, pull requests and labels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create everything described in .github/demos
  gh-demo hydrate

  # Reset the repository first, keeping what preserve.json protects
  gh-demo hydrate --clean --preserve-config .github/demos/preserve.json

  # Also create a project board from .github/demos/project.json
  gh-demo hydrate --create-project

  # See what cleanup would remove
  gh-demo cleanup --issues --labels --dry-run
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    hydrate_parser = subparsers.add_parser("hydrate", help="Create demo content in the repository")
    _add_common_arguments(hydrate_parser)
    hydrate_parser.add_argument("--no-issues", action="store_true", help="Skip issue creation")
    hydrate_parser.add_argument("--no-discussions", action="store_true", help="Skip discussion creation")
    hydrate_parser.add_argument("--no-prs", action="store_true", help="Skip pull request creation")
    hydrate_parser.add_argument(
        "--clean", action="store_true", help="Clean up existing issues, discussions, pull requests and labels first"
    )
    hydrate_parser.add_argument(
        "--create-project", action="store_true", help="Create a project board and add the created items to it"
    )
    hydrate_parser.add_argument(
        "--project-config",
        default=None,
        help="Project board JSON used with --create-project (default: <config-path>/project.json)",
    )

    cleanup_parser = subparsers.add_parser("cleanup", help="Remove existing content from the repository")
    _add_common_arguments(cleanup_parser)
    cleanup_parser.add_argument("--issues", action="store_true", help="Close open issues")
    cleanup_parser.add_argument("--discussions", action="store_true", help="Delete discussions")
    cleanup_parser.add_argument("--prs", action="store_true", help="Close open pull requests")
    cleanup_parser.add_argument("--labels", action="store_true", help="Delete labels")

    return parser


def _load_preserve(args: argparse.Namespace, config: Config, logger: Logger) -> PreserveConfig:
    path = args.preserve_config or config.preserve_path
    preserve_config = load_preserve_config(path)
    if not preserve_config.is_empty():
        logger.info(f"Loaded preserve rules from {path}")
    return preserve_config


async def run_hydrate(
    ctx: OperationContext, api: UnifiedGitHubAPI, args: argparse.Namespace, config: Config, logger: Logger
) -> None:
    project_config = None
    if args.create_project:
        project_path = args.project_config or config.project_path
        logger.info(f"Loading project configuration from {project_path}")
        project_config = load_project_config(project_path)

    if args.clean:
        options = CleanupOptions.everything(dry_run=args.dry_run, preserve_config=_load_preserve(args, config, logger))
        cleanup_summary = await cleanup(ctx, api, options, logger=logger)
        cleanup_summary.raise_for_error()

    summary = await hydrate(
        ctx,
        api,
        config,
        include_issues=not args.no_issues,
        include_discussions=not args.no_discussions,
        include_pull_requests=not args.no_prs,
        dry_run=args.dry_run,
        logger=logger,
        project_config=project_config,
    )
    summary.raise_for_error()

    for created in summary.created:
        logger.info(f"Created {created.type.value} #{created.number}: {created.url}")
    if summary.project is not None:
        logger.info(f"Project: {summary.project.url}")

    print("Repository hydrated successfully" + (" (dry run)" if args.dry_run else ""))


async def run_cleanup(
    ctx: OperationContext, api: UnifiedGitHubAPI, args: argparse.Namespace, config: Config, logger: Logger
) -> None:
    preserve_config = _load_preserve(args, config, logger)
    if any((args.issues, args.discussions, args.prs, args.labels)):
        options = CleanupOptions(
            clean_issues=args.issues,
            clean_discussions=args.discussions,
            clean_pull_requests=args.prs,
            clean_labels=args.labels,
            dry_run=args.dry_run,
            preserve_config=preserve_config,
        )
    else:
        options = CleanupOptions.everything(dry_run=args.dry_run, preserve_config=preserve_config)

    summary = await cleanup(ctx, api, options, logger=logger)
    summary.raise_for_error()
    print(f"Cleanup completed: {summary}")


async def run(args: argparse.Namespace) -> None:
    config = Config(config_root=args.config_path)
    logger = get_logger_with_params(config=config, debug=args.debug)
    token = await get_github_token(logger=logger)

    ctx = OperationContext()
    loop = asyncio.get_running_loop()
    # Ctrl-C stops before the next item instead of killing in-flight requests
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, ctx.cancel)

    try:
        async with UnifiedGitHubAPI.from_token(
            token=token,
            owner=args.owner,
            repo=args.repo,
            logger=logger,
            api_timeout=config.api_timeout,
        ) as api:
            if args.command == "hydrate":
                await run_hydrate(ctx, api, args, config, logger)
            else:
                await run_cleanup(ctx, api, args, config, logger)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except (LayeredError, PartialFailureError, ItemError, NoApiTokenError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
