"""Change detection between two input snapshots."""

from collections.abc import Mapping

# A removed path. A change map never stores "unchanged": unchanged paths are absent.
TOMBSTONE = None

ChangeMap = dict[str, bytes | None]


def get_changes(old: Mapping[str, bytes] | None, new: Mapping[str, bytes]) -> ChangeMap:
    """
    Sparse map of what it takes to get from `old` to `new`.

    - path in both, same content object   → omitted
    - path in both, different object      → new content
    - path only in `new`                  → new content
    - path only in `old`                  → TOMBSTONE

    `old=None` means there was no previous pass: every path of `new` is reported.
    Comparison is by identity (`is`), see lazybuild.snapshot.
    """
    if old is None:
        return dict(new)

    changes: ChangeMap = {}

    for path, content in new.items():
        if old.get(path) is not content:
            changes[path] = content

    for path in old:
        if path not in new:
            changes[path] = TOMBSTONE

    return changes
