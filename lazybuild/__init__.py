"""lazybuild - incremental build engine for in-memory file snapshots.

Quick Start:
    >>> from lazybuild import LazyBuilder, Snapshot
    >>>
    >>> def transform(path, content, ctx):
    ...     if path == "banner.txt":
    ...         return None
    ...     return {path: b"/* " + ctx.import_file("banner.txt") + b" */\\n" + content}
    >>>
    >>> builder = LazyBuilder(transform)
    >>> output = await builder.build(Snapshot.from_texts({"a.txt": "x", "banner.txt": "COPYRIGHT"}))
    >>>
    >>> # only a.txt is rebuilt: it imported banner.txt
    >>> output = await builder.build(builder.input.set("banner.txt", b"NEW"))
"""

__version__ = "0.1.0"  # Keep in sync with pyproject.toml

# =============================================================================
# Core API
# =============================================================================

from lazybuild.builder import BuildReport, FileReport, LazyBuilder
from lazybuild.changes import TOMBSTONE, get_changes
from lazybuild.config import BuilderSettings, settings

# =============================================================================
# Error Handling & Logging
# =============================================================================
from lazybuild.errors import (
    ConcurrentBuildError,
    InvalidImportPathError,
    InvalidInputError,
    InvalidOutputPathError,
    InvalidOutputValueError,
    InvalidResultTypeError,
    LazyBuildError,
    OutputCollisionError,
)
from lazybuild.executor import ImportContext, as_async_transform, run_transforms
from lazybuild.logging_config import BatchLogger, configure_logging, get_logger

# =============================================================================
# Building Blocks
# =============================================================================
from lazybuild.planner import RebuildPlan, select_rebuild_set
from lazybuild.reconciler import Generation, reconcile
from lazybuild.relations import RelationTable, causations_table, importations_table
from lazybuild.results import OutputClaims, normalize_result
from lazybuild.snapshot import EMPTY_SNAPSHOT, Snapshot, ensure_bytes, is_rooted_path, normalize_path

__all__ = [
    # Version
    "__version__",
    # Core
    "LazyBuilder",
    "BuildReport",
    "FileReport",
    "Snapshot",
    "EMPTY_SNAPSHOT",
    # Building blocks
    "get_changes",
    "TOMBSTONE",
    "RebuildPlan",
    "select_rebuild_set",
    "ImportContext",
    "as_async_transform",
    "run_transforms",
    "OutputClaims",
    "normalize_result",
    "Generation",
    "reconcile",
    "RelationTable",
    "importations_table",
    "causations_table",
    "normalize_path",
    "is_rooted_path",
    "ensure_bytes",
    # Config
    "BuilderSettings",
    "settings",
    # Logging
    "configure_logging",
    "get_logger",
    "BatchLogger",
    # Errors
    "LazyBuildError",
    "ConcurrentBuildError",
    "InvalidInputError",
    "InvalidImportPathError",
    "InvalidResultTypeError",
    "InvalidOutputValueError",
    "InvalidOutputPathError",
    "OutputCollisionError",
]
