"""
Relation tables between build paths and other paths.

Two tables exist per generation:

    importations  <L: build path, R: imported path>   many-to-many
    causations    <L: build path, R: output path>     each R has one L

Both keep a forward (left → rights) and a reverse (right → lefts) index so
that "all rights" and "who owns this right" are O(1) lookups. Insertion order
is preserved in both directions.
"""

from collections.abc import Callable, Iterator

from lazybuild.errors import OutputCollisionError


class RelationTable:
    """
    Bipartite relation of (left, right) pairs.

    Args:
        name: Table name used in error messages
        unique_rights: Reject a right value claimed by a second left key

    Example:
        >>> table = RelationTable("importations")
        >>> table.add("a.js", "banner.txt")
        >>> table.add("b.js", "banner.txt")
        >>> sorted(table.lefts_for("banner.txt"))
        ['a.js', 'b.js']
    """

    def __init__(self, name: str, unique_rights: bool = False) -> None:
        self.name = name
        self.unique_rights = unique_rights
        self._rights: dict[str, dict[str, None]] = {}
        self._lefts: dict[str, dict[str, None]] = {}
        self._size = 0

    def add(self, left: str, right: str) -> None:
        """Add an edge. Re-adding an existing edge is a no-op."""
        lefts = self._lefts.get(right)
        if lefts is not None and left in lefts:
            return

        if self.unique_rights and lefts:
            owner = next(iter(lefts))
            raise OutputCollisionError(
                f'when building "{left}" the transform tried to output to "{right}", '
                f'but this has already been output by "{owner}"',
                build_path=left,
                output_path=right,
                other_build_path=owner,
                table=self.name,
            )

        self._rights.setdefault(left, {})[right] = None
        self._lefts.setdefault(right, {})[left] = None
        self._size += 1

    def has_left(self, left: str) -> bool:
        return left in self._rights

    def has_right(self, right: str) -> bool:
        return right in self._lefts

    def rights_for(self, left: str) -> tuple[str, ...]:
        return tuple(self._rights.get(left, ()))

    def lefts_for(self, right: str) -> tuple[str, ...]:
        return tuple(self._lefts.get(right, ()))

    def owner_of(self, right: str) -> str | None:
        """First left key holding this right value (the only one for causations)."""
        lefts = self._lefts.get(right)
        return next(iter(lefts)) if lefts else None

    def all_lefts(self) -> set[str]:
        return set(self._rights)

    def all_rights(self) -> set[str]:
        return set(self._lefts)

    def copy_edges_from(self, other: "RelationTable", keep: Callable[[str], bool]) -> int:
        """Copy every edge of `other` whose left key satisfies `keep`. Returns edges copied."""
        copied = 0
        for left, right in other:
            if keep(left):
                self.add(left, right)
                copied += 1
        return copied

    def copy(self) -> "RelationTable":
        clone = RelationTable(self.name, unique_rights=self.unique_rights)
        clone.copy_edges_from(self, keep=lambda _: True)
        return clone

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for left, rights in self._rights.items():
            for right in rights:
                yield left, right

    def __len__(self) -> int:
        return self._size

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        left, right = pair
        return right in self._rights.get(left, ())

    def __repr__(self) -> str:
        return f"RelationTable({self.name!r}, edges={self._size}, lefts={len(self._rights)})"


def importations_table() -> RelationTable:
    """build path → paths it read through import_file()."""
    return RelationTable("importations")


def causations_table() -> RelationTable:
    """build path → paths it produced. An output path has exactly one producer."""
    return RelationTable("causations", unique_rights=True)
