"""
Transform execution.

Pipeline:
    1. Normalize the user transform to one async contract (once, at construction)
    2. For each dispatchable build path, create an ImportContext
    3. Run every invocation concurrently, wait for all of them to settle
    4. Re-raise the first failure in plan order, or hand back the raw results

Invocations only write importation edges keyed by their own build path, so
the shared table needs no locking.
"""

import asyncio
import functools
import inspect
from collections.abc import Awaitable, Callable, Generator, Mapping
from dataclasses import dataclass
from typing import Any

from lazybuild.errors import InvalidImportPathError
from lazybuild.logging_config import get_logger
from lazybuild.planner import RebuildPlan
from lazybuild.relations import RelationTable
from lazybuild.snapshot import is_rooted_path, normalize_path

logger = get_logger(__name__)

AsyncTransform = Callable[[str, bytes, "ImportContext"], Awaitable[Any]]


class ImportContext:
    """
    Capability handed to the transform for one build path.

    Example:
        def transform(path, content, ctx):
            banner = ctx.import_file("banner.txt")
            return b"/* " + banner + b" */\\n" + content
    """

    def __init__(
        self,
        build_path: str,
        input: Mapping[str, bytes],
        importations: RelationTable,
        strict: bool = True,
    ) -> None:
        self.build_path = build_path
        self._input = input
        self._importations = importations
        self._strict = strict

    def import_file(self, path: str) -> bytes | None:
        """Record that this build path depends on `path`; return its current content or None."""
        if not isinstance(path, str):
            raise InvalidImportPathError(
                f"import_file() expects a str path, got {type(path).__name__} "
                f'when building "{self.build_path}"',
                build_path=self.build_path,
                import_path=path,
            )
        if is_rooted_path(path):
            if self._strict:
                raise InvalidImportPathError(
                    f'import_file() should not be used for absolute paths, got "{path}" '
                    f'when building "{self.build_path}"',
                    build_path=self.build_path,
                    import_path=path,
                )
        else:
            path = normalize_path(path)

        self._importations.add(self.build_path, path)
        return self._input.get(path)

    @property
    def imported(self) -> tuple[str, ...]:
        return self._importations.rights_for(self.build_path)

    def __repr__(self) -> str:
        return f"ImportContext({self.build_path!r})"


@dataclass
class Invocation:
    """Raw outcome of one transform call."""

    build_path: str
    result: Any
    context: ImportContext


async def _drive_generator(gen: Generator) -> Any:
    # Generator-style transform: every yielded awaitable is awaited and its
    # value (or exception) is sent back in; the return value is the result.
    value: Any = None
    error: BaseException | None = None
    while True:
        try:
            yielded = gen.throw(error) if error is not None else gen.send(value)
        except StopIteration as stop:
            return stop.value

        value, error = None, None
        try:
            value = await yielded if inspect.isawaitable(yielded) else yielded
        except Exception as e:
            error = e


def as_async_transform(fn: Callable[..., Any]) -> AsyncTransform:
    """
    Wrap any supported transform form into `async (path, content, ctx) -> result`.

    Supported:
        - plain function (may return an awaitable, which is awaited)
        - `async def` function
        - generator function yielding awaitables
    """
    if not callable(fn):
        raise TypeError(f"transform must be callable, got: {type(fn).__name__}")

    if inspect.iscoroutinefunction(fn):
        return fn

    is_plain_generator = inspect.isgeneratorfunction(fn) and not (
        fn.__code__.co_flags & inspect.CO_ITERABLE_COROUTINE
    )

    @functools.wraps(fn)
    async def transform(build_path: str, content: bytes, ctx: ImportContext) -> Any:
        result = fn(build_path, content, ctx)
        if is_plain_generator:
            return await _drive_generator(result)
        if inspect.isawaitable(result):
            return await result
        return result

    return transform


async def run_transforms(
    plan: RebuildPlan,
    transform: AsyncTransform,
    input: Mapping[str, bytes],
    importations: RelationTable,
    strict_import_paths: bool = True,
) -> list[Invocation]:
    """
    Run `transform` for every dispatchable entry of `plan` concurrently.

    All invocations settle before anything is raised, so a failure never
    leaves siblings running in the background.

    Raises:
        The first exception in plan order, unchanged.
    """
    contexts = [
        ImportContext(build_path, input, importations, strict=strict_import_paths)
        for build_path, _ in plan.to_dispatch()
    ]
    contents = [content for _, content in plan.to_dispatch()]

    outcomes = await asyncio.gather(
        *(transform(ctx.build_path, content, ctx) for ctx, content in zip(contexts, contents)),
        return_exceptions=True,
    )

    # Cancellation and interpreter exits win over ordinary failures
    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome

    failures = [(ctx, outcome) for ctx, outcome in zip(contexts, outcomes) if isinstance(outcome, Exception)]
    if failures:
        ctx, first = failures[0]
        logger.debug(
            "transform_failed",
            build_path=ctx.build_path,
            error=repr(first),
            failed=len(failures),
        )
        raise first

    return [Invocation(ctx.build_path, outcome, ctx) for ctx, outcome in zip(contexts, outcomes)]
