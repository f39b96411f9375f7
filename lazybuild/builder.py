"""
LazyBuilder - incremental build orchestrator.

Pipeline per build() call:
    1. Guard: reject if a pass is already in flight
    2. Validate the input snapshot
    3. Change detection against the previous input
    4. Rebuild set = changes + direct importers of changed paths
    5. Run the transform for every rebuild path that still has content
    6. Normalize results, claim output paths
    7. Reconcile with the previous generation, compute deletions
    8. Swap in the new generation

Any failure in 2-7 leaves the previous generation untouched.

Usage:
    >>> def transform(path, content, ctx):
    ...     if path == "banner.txt":
    ...         return None
    ...     banner = ctx.import_file("banner.txt")
    ...     return {path: b"/* " + banner + b" */\\n" + content}
    >>> builder = LazyBuilder(transform)
    >>> output = await builder.build(Snapshot.from_texts({"a.txt": "x", "banner.txt": "COPYRIGHT"}))
    >>> output.to_texts()
    {'a.txt': '/* COPYRIGHT */\\nx'}
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lazybuild.changes import get_changes
from lazybuild.config import BuilderSettings
from lazybuild.config import settings as default_settings
from lazybuild.errors import ConcurrentBuildError, InvalidInputError
from lazybuild.executor import as_async_transform, run_transforms
from lazybuild.logging_config import BatchLogger, get_logger
from lazybuild.planner import select_rebuild_set
from lazybuild.reconciler import Generation, reconcile
from lazybuild.relations import RelationTable, causations_table, importations_table
from lazybuild.results import OutputClaims, normalize_result
from lazybuild.snapshot import EMPTY_SNAPSHOT, Snapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileReport:
    """What one build path did during a pass."""

    build_path: str
    imported: tuple[str, ...]
    outputs: tuple[str, ...]


@dataclass(frozen=True)
class BuildReport:
    """Summary of the last successful pass."""

    generation: int
    changed: tuple[str, ...]
    dependents: tuple[str, ...]
    rebuilt: tuple[str, ...]
    deleted: tuple[str, ...]
    files: tuple[FileReport, ...]
    duration_ms: float

    def summary(self) -> str:
        return (
            f"generation {self.generation}: "
            f"{len(self.rebuilt)} rebuilt, "
            f"{len(self.deleted)} deleted "
            f"in {self.duration_ms:.2f}ms"
        )


class LazyBuilder:
    """
    Incremental build engine around a single transform.

    The transform is called as `transform(build_path, content, ctx)` and may be
    a plain function, an async function or a generator function yielding
    awaitables. `ctx.import_file(path)` reads another input file and records
    the dependency.

    Only one build() may run at a time; a second concurrent call fails with
    ConcurrentBuildError instead of waiting.
    """

    def __init__(
        self,
        transform: Callable[..., Any],
        *,
        settings: BuilderSettings | None = None,
    ) -> None:
        self._transform = as_async_transform(transform)
        self._settings = settings or default_settings
        self._generation = Generation.empty()
        self._building = False
        self._last_report: BuildReport | None = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def building(self) -> bool:
        return self._building

    @property
    def generation(self) -> int:
        return self._generation.number

    @property
    def input(self) -> Snapshot:
        return self._generation.input if self._generation.input is not None else EMPTY_SNAPSHOT

    @property
    def output(self) -> Snapshot:
        return self._generation.output

    @property
    def importations(self) -> RelationTable:
        return self._generation.importations.copy()

    @property
    def causations(self) -> RelationTable:
        return self._generation.causations.copy()

    @property
    def last_report(self) -> BuildReport | None:
        return self._last_report

    def reset(self) -> None:
        """Forget every generation; the next build() rebuilds everything."""
        if self._building:
            raise ConcurrentBuildError("cannot reset while a build is in progress")
        self._generation = Generation.empty()
        self._last_report = None

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def build(self, input: Snapshot) -> Snapshot:
        """
        Run one incremental pass and return the full output snapshot.

        Raises:
            ConcurrentBuildError: a previous build() has not finished
            InvalidInputError: `input` is not a valid Snapshot
            LazyBuildError: result, output path or collision errors
            Exception: whatever the transform raised, unchanged
        """
        # No await before the flag is set: a concurrent call always sees it.
        if self._building:
            raise ConcurrentBuildError(
                "You must wait for previous build() to finish before calling build() again."
            )
        self._building = True

        generation_number = self._generation.number + 1
        try:
            return await self._build(input, generation_number)
        except Exception as e:
            logger.error(
                "build_failed",
                generation=generation_number,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
        finally:
            self._building = False

    async def _build(self, input: Snapshot, generation_number: int) -> Snapshot:
        # Suspend once with the flag set, even when nothing is dispatched.
        await asyncio.sleep(0)
        start = time.perf_counter()

        if not isinstance(input, Snapshot):
            raise InvalidInputError(
                f"input must be a Snapshot, got: {type(input).__name__}",
                value_type=type(input).__name__,
            )
        input.validate()

        previous = self._generation
        logger.info("build_started", generation=generation_number, files=len(input))

        # fresh relation tables for this pass
        importations = importations_table()  # <L: build path, R: import path>
        causations = causations_table()  # <L: build path, R: output path>

        changes = get_changes(previous.input, input)
        plan = select_rebuild_set(changes, input, previous.importations)
        logger.debug("build_plan", generation=generation_number, plan=plan.summary())

        with BatchLogger(
            logger,
            "transform_batch",
            sample_size=self._settings.log_sample_size,
            generation=generation_number,
        ) as batch:
            invocations = await run_transforms(
                plan,
                self._transform,
                input,
                importations,
                strict_import_paths=self._settings.strict_import_paths,
            )

            # outputs are claimed only after every invocation settled
            claims = OutputClaims()
            writes: dict[str, bytes] = {}
            files: list[FileReport] = []
            for invocation in invocations:
                outputs = normalize_result(
                    invocation.build_path,
                    invocation.result,
                    claims,
                    causations,
                    writes,
                    encoding=self._settings.text_encoding,
                )
                report = FileReport(
                    build_path=invocation.build_path,
                    imported=invocation.context.imported,
                    outputs=outputs,
                )
                files.append(report)
                batch.record(build_path=report.build_path, imported=len(report.imported), outputs=len(outputs))

        generation, deleted = reconcile(previous, input, plan, importations, causations, writes)

        # commit
        self._generation = generation
        self._last_report = BuildReport(
            generation=generation.number,
            changed=tuple(sorted(plan.changed)),
            dependents=tuple(sorted(plan.dependents)),
            rebuilt=tuple(f.build_path for f in files),
            deleted=deleted,
            files=tuple(files),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        logger.info(
            "build_committed",
            generation=generation.number,
            rebuilt=len(files),
            written=len(writes),
            deleted=len(deleted),
            outputs=len(generation.output),
            duration_ms=self._last_report.duration_ms,
        )

        return Snapshot._trusted(generation.output.to_dict())
