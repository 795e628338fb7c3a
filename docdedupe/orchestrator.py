"""Pipeline orchestration for repairing a documentation corpus."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional

from lxml import etree

from .config import DocDedupeConfig, load_config
from .discovery import FileDiscovery
from .document import load_document, serialize_document, write_document
from .logging import get_logger
from .models import FileResult, FileStatus, RunSummary
from .repair import (
    ContentDeduplicator,
    FrameworkValidator,
    LosingElementPolicy,
    MemberDeduplicator,
    ValidationOutcome,
    resolve_policy,
)
from .stores import IdentifierCache, IdentifierSet


@dataclass
class RepairReport:
    """Changes the three stages made to one in-memory tree."""

    members_removed: int
    content_removed: int
    validation: ValidationOutcome

    @property
    def dirty(self) -> bool:
        return bool(self.members_removed or self.content_removed or self.validation.pruned)


@dataclass
class RepairPipeline:
    """The three per-file stages, in the order they run."""

    members: MemberDeduplicator
    content: ContentDeduplicator
    validator: FrameworkValidator

    def repair(self, root: etree._Element) -> RepairReport:
        members_removed = self.members.deduplicate(root)
        content_removed = self.content.deduplicate(root)
        validation = self.validator.validate(root)
        return RepairReport(
            members_removed=members_removed,
            content_removed=content_removed,
            validation=validation,
        )


class Orchestrator:
    """Builds the identifier set, then repairs every discovered file in parallel."""

    def __init__(
        self,
        discovery: FileDiscovery | None = None,
        policy: LosingElementPolicy | None = None,
        *,
        dry_run: bool = False,
        workers: Optional[int] = None,
    ) -> None:
        self.discovery = discovery or FileDiscovery()
        self.policy = policy
        self.dry_run = dry_run
        self.workers = workers
        self.logger = get_logger("orchestrator")

    def run(self, path: str | Path, *, config: DocDedupeConfig | None = None) -> RunSummary:
        """Repair the corpus rooted at ``path``.

        Index problems raise :class:`~docdedupe.stores.IndexLoadError` before any
        file is touched. Per-file problems are reported in the summary.
        """
        root = Path(path).expanduser().resolve()
        if config is None:
            config = load_config(root)
        else:
            config = replace(config, root=root)
        self.logger.info("Starting run for %s%s", root, " (dry-run)" if self.dry_run else "")

        identifiers = self.build_identifiers(config)
        pipeline = self.build_pipeline(config, identifiers)
        files = self.discovery.discover(config)

        summary = RunSummary(root=root, identifiers=len(identifiers), dry_run=self.dry_run)
        workers = self.workers or config.workers
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="docdedupe") as executor:
            results: List[FileResult] = list(
                executor.map(lambda file_path: self.process_file(file_path, pipeline), files)
            )
        summary.results = sorted(results, key=lambda result: result.path)

        counts = summary.counts()
        self.logger.info(
            "Finished: %d rewritten, %d deleted, %d unchanged, %d failed",
            counts["rewritten"],
            counts["deleted"],
            counts["unchanged"],
            counts["failed"],
        )
        return summary

    def build_identifiers(self, config: DocDedupeConfig) -> IdentifierSet:
        cache = IdentifierCache(config.index_path, skip_malformed=config.index_errors == "skip")
        return cache.build()

    def build_pipeline(self, config: DocDedupeConfig, identifiers: IdentifierSet) -> RepairPipeline:
        policy = self.policy or resolve_policy(config.losing_policy)
        self.logger.debug("Using losing-element policy %s", policy.name or type(policy).__name__)
        return RepairPipeline(
            members=MemberDeduplicator(policy),
            content=ContentDeduplicator(config.unary_kinds, case_sensitive=config.content_case_sensitive),
            validator=FrameworkValidator(identifiers),
        )

    def process_file(self, path: Path, pipeline: RepairPipeline) -> FileResult:
        """Repair one file; failures are returned, never raised."""
        self.logger.debug("Analyzing file: %s", path)
        try:
            tree = load_document(path)
            report = pipeline.repair(tree.getroot())
            payload = None
            if report.dirty and not report.validation.delete_file:
                payload = serialize_document(tree)
        except Exception as exc:
            self._log_exception(f"Failed to process {path}", exc)
            return FileResult(path=path, status=FileStatus.FAILED, error=f"{type(exc).__name__}: {exc}")

        result = FileResult(
            path=path,
            status=FileStatus.UNCHANGED,
            members_removed=report.members_removed,
            content_removed=report.content_removed,
            members_pruned=report.validation.pruned,
        )

        if report.validation.delete_file:
            return self._delete(path, result, report.validation.orphan_type)
        if payload is not None:
            return self._rewrite(path, payload, result)

        self.logger.debug("%s is clean", path)
        return result

    def _delete(self, path: Path, result: FileResult, orphan: Optional[str]) -> FileResult:
        if not self.dry_run:
            try:
                path.unlink()
            except OSError as exc:
                self._log_exception(f"Failed to delete {path}", exc)
                return replace(result, status=FileStatus.FAILED, error=f"{type(exc).__name__}: {exc}")
        verb = "Would delete" if self.dry_run else "Deleted"
        self.logger.info("%s %s: type %s is not in the index", verb, path, orphan)
        return replace(result, status=FileStatus.DELETED)

    def _rewrite(self, path: Path, payload: bytes, result: FileResult) -> FileResult:
        if not self.dry_run:
            try:
                write_document(path, payload)
            except OSError as exc:
                self.logger.error(
                    "Failed to write %s: %s\nUnwritten content:\n%s",
                    path,
                    exc,
                    payload.decode("utf-8", errors="replace"),
                )
                return replace(result, status=FileStatus.FAILED, error=f"{type(exc).__name__}: {exc}")
        self.logger.info(
            "%s %s: %d duplicate members, %d duplicate docs elements, %d orphaned members",
            "Would rewrite" if self.dry_run else "Rewrote",
            path,
            result.members_removed,
            result.content_removed,
            result.members_pruned,
        )
        return replace(result, status=FileStatus.REWRITTEN)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["Orchestrator", "RepairPipeline", "RepairReport"]
