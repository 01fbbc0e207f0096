"""Sequence demo hydration and cleanup runs.

hydrate: load content, make sure every label exists, then create issues,
discussions and pull requests one at a time in file order.

cleanup: for each selected kind, list what exists, keep what the preserve
rules match and delete (or close) the rest.

Per-item failures never stop a run; they are collected and reduced through
``ErrorCollector``. Cancelling the context stops before the next item and
leaves already created or deleted items in place.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from gh_demo.libs.config import Config
from gh_demo.libs.content import (
    collect_labels,
    load_discussions,
    load_issues,
    load_pull_requests,
    prepare_labels_to_ensure,
    read_labels_json,
)
from gh_demo.libs.exceptions import (
    ErrorCollector,
    ErrorLayer,
    ItemError,
    LayeredError,
    PartialFailureError,
    api_error,
    config_error,
    is_context_error,
    is_layer,
    is_project_permission_error,
    project_error,
    with_context_safe,
    wrap_with_operation,
)
from gh_demo.libs.graphql.unified_api import UnifiedGitHubAPI
from gh_demo.libs.models import (
    CreatedItemInfo,
    Discussion,
    Issue,
    Label,
    Project,
    ProjectConfiguration,
    PullRequest,
)
from gh_demo.libs.preserve import PreserveConfig, should_preserve
from gh_demo.utils.context import OperationContext

T = TypeVar("T")


@dataclass
class SectionSummary:
    """Counts for one section of a hydration run (labels, issues, ...)."""

    name: str
    total: int = 0
    success: int = 0
    failures: int = 0
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.name}: {self.total} total, {self.success} successful, {self.failures} failed"


@dataclass
class HydrationSummary:
    dry_run: bool = False
    sections: list[SectionSummary] = field(default_factory=list)
    created: list[CreatedItemInfo] = field(default_factory=list)
    project: Project | None = None
    collector: ErrorCollector = field(default_factory=lambda: ErrorCollector("hydrate"))
    aborted: LayeredError | None = None

    def section(self, name: str) -> SectionSummary | None:
        return next((section for section in self.sections if section.name == name), None)

    @property
    def error(self) -> BaseException | None:
        """The cancellation that stopped the run, else the reduced per-item failures."""
        return self.aborted or self.collector.result()

    def raise_for_error(self) -> None:
        if (error := self.error) is not None:
            raise error


@dataclass
class CleanupOptions:
    clean_issues: bool = False
    clean_discussions: bool = False
    clean_pull_requests: bool = False
    clean_labels: bool = False
    dry_run: bool = False
    preserve_config: PreserveConfig | None = None

    @classmethod
    def everything(cls, dry_run: bool = False, preserve_config: PreserveConfig | None = None) -> CleanupOptions:
        return cls(
            clean_issues=True,
            clean_discussions=True,
            clean_pull_requests=True,
            clean_labels=True,
            dry_run=dry_run,
            preserve_config=preserve_config,
        )


@dataclass
class CleanupSummary:
    dry_run: bool = False
    issues_deleted: int = 0
    issues_preserved: int = 0
    discussions_deleted: int = 0
    discussions_preserved: int = 0
    pull_requests_deleted: int = 0
    pull_requests_preserved: int = 0
    labels_deleted: int = 0
    labels_preserved: int = 0
    collector: ErrorCollector = field(default_factory=lambda: ErrorCollector("cleanup"))
    aborted: LayeredError | None = None

    def count(self, kind: str, outcome: str) -> None:
        """Add one to ``<kind>s_<outcome>``, e.g. count("pull_request", "deleted")."""
        attribute = f"{kind}s_{outcome}"
        setattr(self, attribute, getattr(self, attribute) + 1)

    @property
    def errors(self) -> list[str]:
        return [str(err) for err in self.collector.errors]

    @property
    def error(self) -> BaseException | None:
        return self.aborted or self.collector.result()

    def raise_for_error(self) -> None:
        if (error := self.error) is not None:
            raise error

    def __str__(self) -> str:
        return (
            f"Issues({self.issues_deleted} deleted, {self.issues_preserved} preserved), "
            f"Discussions({self.discussions_deleted} deleted, {self.discussions_preserved} preserved), "
            f"PRs({self.pull_requests_deleted} deleted, {self.pull_requests_preserved} preserved), "
            f"Labels({self.labels_deleted} deleted, {self.labels_preserved} preserved)"
        )


class _Aborted(Exception):
    """Internal signal: the run context is done, stop processing."""

    def __init__(self, error: LayeredError) -> None:
        super().__init__(str(error))
        self.error = error


def _check(ctx: OperationContext, operation: str) -> None:
    if ctx.done:
        raise _Aborted(ctx.error(operation))


# ===== Hydration =====


async def ensure_labels_exist(
    ctx: OperationContext,
    api: UnifiedGitHubAPI,
    labels: Sequence[Label],
    summary: SectionSummary,
    dry_run: bool = False,
    logger: logging.Logger | None = None,
) -> None:
    """
    Create every label in ``labels`` the repository does not have yet.

    A failed label creation is recorded in ``summary`` and does not stop the others.

    Raises:
        LayeredError: If existing labels cannot be listed, or the context is done
    """
    logger = logger or api.logger
    if not labels:
        return

    logger.debug("Fetching existing labels from repository")
    existing = {label.name for label in await api.list_labels(ctx)}
    logger.debug(f"Found {len(existing)} existing labels in repository")

    for label in labels:
        ctx.raise_if_done("ensure_labels")

        if label.name in existing:
            summary.success += 1
            logger.debug(f"Label '{label.name}' already exists")
            continue

        if dry_run:
            logger.info(f"Would create label: {label.name} (color: {label.color})")
            summary.success += 1
            continue

        try:
            await api.create_label(ctx, label)
        except LayeredError as ex:
            if ctx.done:
                raise ctx.error("ensure_labels") from ex
            summary.failures += 1
            summary.errors.append(f"Label '{label.name}': {ex}")
            logger.debug(f"Failed to create label '{label.name}': {ex}")
        else:
            summary.success += 1
            logger.debug(f"Created label '{label.name}' with color '{label.color}'")


async def _create_items(
    ctx: OperationContext,
    items: Sequence[T],
    kind: str,
    section_name: str,
    create: Callable[[OperationContext, T], Awaitable[CreatedItemInfo]],
    summary: HydrationSummary,
    logger: logging.Logger,
) -> None:
    section = SectionSummary(name=section_name, total=len(items))
    summary.sections.append(section)
    if not items:
        return

    logger.debug(f"Creating {len(items)} {section_name.lower()}")
    operation = f"create_{kind.lower().replace(' ', '_')}s"
    try:
        for index, item in enumerate(items):
            _check(ctx, operation)
            title: str = getattr(item, "title", "")

            if summary.dry_run:
                logger.info(f"Would create {kind.lower()}: {title}")
                section.success += 1
                continue

            try:
                created = await create(ctx, item)
            except LayeredError as ex:
                _check(ctx, operation)
                item_error = ItemError(kind, index, title, ex)
                summary.collector.add(item_error)
                section.errors.append(str(item_error))
                section.failures += 1
                logger.debug(f"Failed to create {kind.lower()} '{title}': {ex}")
            else:
                summary.created.append(created)
                section.success += 1
                logger.debug(f"Created {kind.lower()} '{title}' ({created.url})")
    finally:
        logger.info(str(section))


async def _create_project(
    ctx: OperationContext,
    api: UnifiedGitHubAPI,
    project_config: ProjectConfiguration,
    section: SectionSummary,
    logger: logging.Logger,
) -> Project:
    """
    Create the project board, then apply its description and custom fields.

    Only creating the board can fail the run. Description and field failures
    are logged and kept in ``section.errors``.
    """
    logger.info(f"Creating project '{project_config.title}'")
    try:
        project = await api.create_project(ctx, project_config)
    except LayeredError as ex:
        if is_context_error(ex) and ctx.done:
            raise
        if is_project_permission_error(ex):
            logger.info("Failed to create project due to insufficient permissions")
            logger.info("Ensure your GitHub token has 'write:org' or 'write:user' scope")
            raise
        if is_layer(ex, ErrorLayer.PROJECT):
            raise
        raise project_error("create_project", "failed to create project", ex) from ex

    logger.info(f"Created project '{project.title}' (number: {project.number}, URL: {project.url})")

    setup_steps: list[tuple[str, Callable[[], Awaitable[None]]]] = [
        (
            "update description",
            lambda: api.update_project_description(ctx, project.node_id, project_config.description),
        ),
        ("configure fields", lambda: api.configure_project_fields(ctx, project.node_id, project_config.fields)),
    ]
    for step, apply in setup_steps:
        try:
            await apply()
        except (LayeredError, PartialFailureError) as ex:
            if is_context_error(ex) and ctx.done:
                raise
            section.errors.append(f"Project '{project.title}' ({step}): {ex}")
            logger.info(f"Failed to {step} of project '{project.title}': {ex}")

    return project


async def _add_items_to_project(
    ctx: OperationContext,
    api: UnifiedGitHubAPI,
    project: Project,
    items: Sequence[CreatedItemInfo],
    section: SectionSummary,
    logger: logging.Logger,
) -> None:
    """Add created items to the board. Failures are recorded in ``section`` and never fail the run."""
    addable = [item for item in items if item.node_id]
    for item in items:
        if not item.node_id:
            logger.debug(f"Skipping {item.type.value} '{item.title}' - no node ID available")

    section.total = len(addable)
    if not addable:
        return

    logger.info(f"Adding {len(addable)} items to project '{project.title}'")
    try:
        for item in addable:
            _check(ctx, "add_items_to_project")
            try:
                await api.add_item_to_project(ctx, project.node_id, item.node_id)
            except LayeredError as ex:
                _check(ctx, "add_items_to_project")
                err = (
                    project_error("add_item_to_project", "failed to add item to project", ex)
                    .with_context("item_title", item.title)
                    .with_context("item_type", item.type.value)
                    .with_context("item_node_id", item.node_id)
                )
                section.failures += 1
                section.errors.append(str(err))
                logger.info(f"Failed to add {item.type.value} '{item.title}' to project: {ex}")
            else:
                section.success += 1
                logger.debug(f"Added {item.type.value} '{item.title}' to project")
    finally:
        logger.info(str(section))


async def hydrate(
    ctx: OperationContext,
    api: UnifiedGitHubAPI,
    config: Config,
    include_issues: bool = True,
    include_discussions: bool = True,
    include_pull_requests: bool = True,
    dry_run: bool = False,
    logger: logging.Logger | None = None,
    project_config: ProjectConfiguration | None = None,
) -> HydrationSummary:
    """
    Create the demo content described in the config root.

    With ``project_config``, a project board is created after the labels and
    every created item is added to it. Adding items is best effort and is
    reported in the "Project" section only.

    Returns:
        HydrationSummary; its ``error`` is None when every item was created

    Raises:
        LayeredError: config layer when content files cannot be loaded, api layer
            when existing labels cannot be listed, project layer when the board
            cannot be created
    """
    logger = logger or api.logger
    summary = HydrationSummary(dry_run=dry_run)
    logger.info(f"Starting hydration operations (dry-run: {dry_run})")

    try:
        issues: list[Issue] = load_issues(config.issues_path) if include_issues else []
        discussions: list[Discussion] = load_discussions(config.discussions_path) if include_discussions else []
        pull_requests: list[PullRequest] = (
            load_pull_requests(config.pull_requests_path) if include_pull_requests else []
        )
    except LayeredError as ex:
        raise config_error("load_config_files", "failed to load configuration files", ex) from ex

    try:
        explicit_labels = read_labels_json(config.labels_path)
    except LayeredError as ex:
        raise config_error("read_labels_config", "failed to read labels configuration", ex).with_context(
            "path", config.labels_path
        ) from ex

    referenced = collect_labels(issues, discussions, pull_requests)
    labels_to_ensure = prepare_labels_to_ensure(explicit_labels, referenced, config.default_label_color)
    if explicit_labels:
        logger.debug(f"Found {len(explicit_labels)} explicit label definitions from {config.labels_path}")
    logger.debug(f"Found {len(labels_to_ensure)} total labels to ensure exist")

    label_section = SectionSummary(name="Labels", total=len(labels_to_ensure))
    summary.sections.append(label_section)
    try:
        await ensure_labels_exist(ctx, api, labels_to_ensure, label_section, dry_run=dry_run, logger=logger)
    except LayeredError as ex:
        if is_context_error(ex) and ctx.done:
            summary.aborted = ex
            return summary
        raise api_error("ensure_labels", "failed to ensure labels exist", ex) from ex
    logger.info(str(label_section))

    project_section = SectionSummary(name="Project")
    if project_config is not None and dry_run:
        logger.info(f"Would create project '{project_config.title}' (skipped in dry-run mode)")
    elif project_config is not None:
        summary.sections.append(project_section)
        try:
            summary.project = await _create_project(ctx, api, project_config, project_section, logger)
        except LayeredError as ex:
            if is_context_error(ex) and ctx.done:
                summary.aborted = ex
                return summary
            raise

    try:
        if include_issues:
            await _create_items(ctx, issues, "Issue", "Issues", api.create_issue, summary, logger)
        if include_discussions:
            await _create_items(ctx, discussions, "Discussion", "Discussions", api.create_discussion, summary, logger)
        if include_pull_requests:
            await _create_items(
                ctx, pull_requests, "Pull Request", "Pull Requests", api.create_pull_request, summary, logger
            )
        if summary.project is not None:
            await _add_items_to_project(ctx, api, summary.project, summary.created, project_section, logger)
        elif project_config is not None:
            would_add = sum(section.success for section in summary.sections if section is not label_section)
            logger.info(
                f"Would add {would_add} items to project '{project_config.title}' (skipped in dry-run mode)"
            )
    except _Aborted as ex:
        summary.aborted = ex.error
        logger.info(f"Hydration stopped: {ex.error}")

    return summary


# ===== Cleanup =====


async def _cleanup_items(
    ctx: OperationContext,
    kind: str,
    list_items: Callable[[OperationContext], Awaitable[Sequence[Any]]],
    delete: Callable[[OperationContext, str], Awaitable[None]],
    identify: Callable[[Any], str],
    options: CleanupOptions,
    summary: CleanupSummary,
    logger: logging.Logger,
) -> None:
    """List, filter and delete one kind, counting into ``summary`` as each item is handled."""
    noun = kind.replace("_", " ")
    _check(ctx, f"cleanup_{kind}s")

    try:
        items = await list_items(ctx)
    except LayeredError as ex:
        _check(ctx, f"list_{kind}s")
        summary.collector.add(wrap_with_operation(ex, ErrorLayer.API, f"list_{kind}s", f"failed to list {noun}s"))
        return

    logger.debug(f"Found {len(items)} {noun}s to evaluate for cleanup")
    for item in items:
        title = getattr(item, "title", None) or getattr(item, "name", "")
        if should_preserve(item, options.preserve_config):
            summary.count(kind, "preserved")
            logger.debug(f"Preserving {noun}: {title}")
            continue

        _check(ctx, f"cleanup_{kind}s")
        if options.dry_run:
            logger.info(f"Would delete {noun}: {title}")
            summary.count(kind, "deleted")
            continue

        identifier = identify(item)
        logger.debug(f"Deleting {noun}: {title}")
        try:
            await delete(ctx, identifier)
        except LayeredError as ex:
            _check(ctx, f"delete_{kind}")
            err = wrap_with_operation(ex, ErrorLayer.API, f"delete_{kind}", f"failed to delete {noun}")
            if kind == "label":
                with_context_safe(err, "label_name", identifier)
            else:
                with_context_safe(err, "title", title)
                with_context_safe(err, "node_id", identifier)
            summary.collector.add(err)
            logger.info(f"Failed to delete {noun} '{title}': {ex}")
        else:
            summary.count(kind, "deleted")


async def cleanup(
    ctx: OperationContext,
    api: UnifiedGitHubAPI,
    options: CleanupOptions,
    logger: logging.Logger | None = None,
) -> CleanupSummary:
    """
    Remove existing content of the selected kinds, keeping what the preserve rules match.

    Issues and pull requests are closed rather than deleted.

    Returns:
        CleanupSummary; its ``error`` is None when every delete succeeded
    """
    logger = logger or api.logger
    summary = CleanupSummary(dry_run=options.dry_run)
    logger.info(f"Starting cleanup operations (dry-run: {options.dry_run})")

    try:
        if options.clean_issues:
            await _cleanup_items(
                ctx, "issue", api.list_issues, api.delete_issue, lambda item: item.node_id, options, summary, logger
            )
        if options.clean_discussions:
            await _cleanup_items(
                ctx,
                "discussion",
                api.list_discussions,
                api.delete_discussion,
                lambda item: item.node_id,
                options,
                summary,
                logger,
            )
        if options.clean_pull_requests:
            await _cleanup_items(
                ctx,
                "pull_request",
                api.list_pull_requests,
                api.delete_pull_request,
                lambda item: item.node_id,
                options,
                summary,
                logger,
            )
        if options.clean_labels:
            await _cleanup_items(
                ctx, "label", api.list_labels, api.delete_label, lambda item: item.name, options, summary, logger
            )
    except _Aborted as ex:
        summary.aborted = ex.error
        logger.info(f"Cleanup stopped: {ex.error}")

    logger.info(f"Cleanup summary: {summary}")
    if summary.collector.has_errors():
        logger.info(f"Cleanup completed with {len(summary.collector)} errors")
    elif summary.aborted is None:
        logger.info("Cleanup completed successfully")

    return summary
