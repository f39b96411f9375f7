"""
Snapshot - immutable path → bytes mapping.

A Snapshot is the unit of input and output of a build pass.

Change detection compares CONTENT IDENTITY, not bytes:
    Two snapshots that hold equal bytes under a key are still "changed" at that
    key when the two values are different objects. Callers signal "unchanged"
    by reusing the same bytes object, which is what set()/remove()/merge() do
    for every key they don't touch. Do not replace the identity check with ==.

    CPython shares a single object for b"" and for every one-byte value, so
    those always look unchanged when their bytes are equal.

Snapshot equality (==) is structural and is meant for callers and tests only.
"""

import posixpath
import re
from collections.abc import Iterator, Mapping

from lazybuild.errors import InvalidInputError


_DRIVE_ROOT = re.compile(r"^[A-Za-z]:[\\/]")


def is_rooted_path(path: str) -> bool:
    """
    True for absolute POSIX paths, UNC/backslash-rooted paths and drive roots.

    A drive letter counts only when a separator follows it ("C:\\x", "c:/x"),
    so names like "a:b.txt" stay relative.
    """
    if path.startswith(("/", "\\")):
        return True
    return bool(_DRIVE_ROOT.match(path))


def normalize_path(path: str) -> str:
    """Collapse redundant segments of a relative path ("./a//b/../c" → "a/c")."""
    return posixpath.normpath(path.replace("\\", "/"))


def is_normal_relative_path(path: str) -> bool:
    if not path or is_rooted_path(path):
        return False
    normal = normalize_path(path)
    return normal == path and normal != "." and normal != ".." and not normal.startswith("../")


def ensure_bytes(value: bytes | str, encoding: str = "utf-8") -> bytes:
    """Encode str, pass bytes through unchanged (same object)."""
    if isinstance(value, str):
        return value.encode(encoding)
    return value


class Snapshot(Mapping):
    """
    Immutable mapping of normalized relative paths to bytes.

    Example:
        >>> snap = Snapshot.from_texts({"a.txt": "x", "banner.txt": "COPYRIGHT"})
        >>> snap2 = snap.set("banner.txt", b"NEW")
        >>> snap2["a.txt"] is snap["a.txt"]
        True
    """

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, bytes] | None = None) -> None:
        files = {} if files is None else files
        if not isinstance(files, Mapping):
            raise InvalidInputError(
                f"Snapshot requires a mapping of path to bytes, got: {type(files).__name__}",
                value_type=type(files).__name__,
            )
        self._files: dict[str, bytes] = dict(files)
        self.validate()

    @classmethod
    def _trusted(cls, files: dict[str, bytes]) -> "Snapshot":
        # Values were validated by the caller; skip the per-key checks.
        snap = cls.__new__(cls)
        snap._files = files
        return snap

    @classmethod
    def from_texts(cls, files: Mapping[str, bytes | str], encoding: str = "utf-8") -> "Snapshot":
        """Build a snapshot from str and/or bytes values."""
        return cls({path: ensure_bytes(value, encoding) for path, value in files.items()})

    def validate(self) -> None:
        """Raise InvalidInputError unless every key is a normal relative path and every value is bytes."""
        for path, content in self._files.items():
            if not isinstance(path, str):
                raise InvalidInputError(
                    f"Snapshot keys must be str, got: {type(path).__name__}",
                    path=path,
                )
            if not is_normal_relative_path(path):
                raise InvalidInputError(
                    f"Snapshot keys must be normalized relative paths, got: {path!r}",
                    path=path,
                )
            if not isinstance(content, bytes):
                raise InvalidInputError(
                    f'Snapshot values must be bytes, got {type(content).__name__} for "{path}"',
                    path=path,
                    value_type=type(content).__name__,
                )

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, path: str) -> bytes:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __repr__(self) -> str:
        return f"Snapshot({len(self._files)} files: {sorted(self._files)!r})"

    # ------------------------------------------------------------------
    # Derivation (untouched keys keep their content objects)
    # ------------------------------------------------------------------

    def set(self, path: str, content: bytes) -> "Snapshot":
        files = dict(self._files)
        files[path] = content
        return Snapshot(files)

    def remove(self, path: str) -> "Snapshot":
        files = dict(self._files)
        files.pop(path, None)
        return Snapshot._trusted(files)

    def merge(self, changes: Mapping[str, bytes]) -> "Snapshot":
        files = dict(self._files)
        files.update(changes)
        return Snapshot(files)

    def clear(self) -> "Snapshot":
        return Snapshot._trusted({})

    def to_dict(self) -> dict[str, bytes]:
        """Shallow copy as a plain dict."""
        return dict(self._files)

    def to_texts(self, encoding: str = "utf-8") -> dict[str, str]:
        return {path: content.decode(encoding) for path, content in self._files.items()}


EMPTY_SNAPSHOT = Snapshot._trusted({})
