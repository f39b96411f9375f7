"""
State reconciliation.

Merges one pass's fresh results with what the previous generation already
knew, and works out which outputs are gone for good.

Steps:
    1. Carry over importation/causation edges of build paths that were not
       in the rebuild set (their facts are still true)
    2. deleted = previous output paths - output paths after carry-over
    3. output  = this pass's writes + previous outputs that are neither
       rewritten nor deleted

Nothing here mutates the previous generation; a new Generation is returned and
the caller swaps it in.
"""

from dataclasses import dataclass, field

from lazybuild.planner import RebuildPlan
from lazybuild.relations import RelationTable, causations_table, importations_table
from lazybuild.snapshot import EMPTY_SNAPSHOT, Snapshot


@dataclass(frozen=True)
class Generation:
    """Committed state of one successful pass."""

    input: Snapshot | None
    output: Snapshot = field(default_factory=lambda: EMPTY_SNAPSHOT)
    importations: RelationTable = field(default_factory=importations_table)
    causations: RelationTable = field(default_factory=causations_table)
    number: int = 0

    @classmethod
    def empty(cls) -> "Generation":
        """State before the first pass. `input=None` makes the first pass build everything."""
        return cls(input=None)


def reconcile(
    previous: Generation,
    new_input: Snapshot,
    plan: RebuildPlan,
    importations: RelationTable,
    causations: RelationTable,
    writes: dict[str, bytes],
) -> tuple[Generation, tuple[str, ...]]:
    """
    Build the next generation.

    `importations`, `causations` and `writes` hold what this pass produced;
    they are extended in place with the carried-over facts.

    Returns:
        (next generation, deleted output paths in previous causation order)

    Raises:
        OutputCollisionError: a rebuilt path claimed an output that an
            untouched build path still owns
    """

    def untouched(build_path: str) -> bool:
        return build_path not in plan

    causations.copy_edges_from(previous.causations, keep=untouched)
    importations.copy_edges_from(previous.importations, keep=untouched)

    new_output_paths = causations.all_rights()
    deleted = tuple(path for _, path in previous.causations if path not in new_output_paths)
    deleted_set = set(deleted)

    output = dict(writes)
    for path, content in previous.output.items():
        if path not in output and path not in deleted_set:
            output[path] = content

    generation = Generation(
        input=new_input,
        output=Snapshot._trusted(output),
        importations=importations,
        causations=causations,
        number=previous.number + 1,
    )
    return generation, deleted
