"""
Rebuild planning

Decides which build paths a pass has to run, from the change map and the
previous generation's importations.

Expansion is single-level: direct importers of a changed path are rebuilt,
importers of those importers are not (unless they changed themselves or also
import the changed path directly).
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from lazybuild.changes import TOMBSTONE, ChangeMap
from lazybuild.relations import RelationTable


@dataclass
class RebuildPlan:
    """
    Rebuild set for one pass.

    `files` maps each build path to its current content, or TOMBSTONE when the
    path no longer exists in the input.
    """

    files: dict[str, bytes | None]
    changed: set[str] = field(default_factory=set)
    dependents: set[str] = field(default_factory=set)

    def __contains__(self, build_path: object) -> bool:
        return build_path in self.files

    def __len__(self) -> int:
        return len(self.files)

    def to_dispatch(self) -> Iterator[tuple[str, bytes]]:
        """Entries with content, in plan order. Tombstones are never dispatched."""
        for build_path, content in self.files.items():
            if content is not TOMBSTONE:
                yield build_path, content

    def summary(self) -> str:
        return (
            f"{len(self.files)} to build: "
            f"{len(self.changed)} changed, "
            f"{len(self.dependents - self.changed)} via imports"
        )


def select_rebuild_set(
    changes: ChangeMap,
    new_input: Mapping[str, bytes],
    old_importations: RelationTable,
) -> RebuildPlan:
    """Start from `changes`; add every build path that imported a changed path last time."""
    files: dict[str, bytes | None] = dict(changes)
    dependents: set[str] = set()

    for build_path, import_path in old_importations:
        if import_path in changes:
            files[build_path] = new_input.get(build_path, TOMBSTONE)
            dependents.add(build_path)

    return RebuildPlan(files=files, changed=set(changes), dependents=dependents)
