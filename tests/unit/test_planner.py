"""
Unit Tests: rebuild planning

Test Coverage:
- changed paths are always in the plan
- direct importers of changed paths are added
- importers of importers are NOT added (single level)
- tombstones are planned but never dispatched
"""

from lazybuild import TOMBSTONE, Snapshot, importations_table, select_rebuild_set


def _importations(*edges):
    table = importations_table()
    for left, right in edges:
        table.add(left, right)
    return table


class TestSelectRebuildSet:
    def test_changes_only(self):
        new = Snapshot({"a.txt": b"a", "b.txt": b"b"})

        plan = select_rebuild_set({"a.txt": new["a.txt"]}, new, _importations())

        assert plan.files == {"a.txt": b"a"}
        assert plan.changed == {"a.txt"}
        assert plan.dependents == set()

    def test_direct_importers_are_added(self):
        # Given: a.js and b.js import banner.txt
        new = Snapshot({"a.js": b"a", "b.js": b"b", "banner.txt": b"NEW", "c.js": b"c"})
        old_importations = _importations(("a.js", "banner.txt"), ("b.js", "banner.txt"))

        # When: banner.txt changed
        plan = select_rebuild_set({"banner.txt": new["banner.txt"]}, new, old_importations)

        # Then
        assert set(plan.files) == {"banner.txt", "a.js", "b.js"}
        assert plan.files["a.js"] is new["a.js"]
        assert plan.dependents == {"a.js", "b.js"}
        assert "c.js" not in plan

    def test_single_level_only(self):
        # top.js → mid.js → leaf.txt
        new = Snapshot({"top.js": b"t", "mid.js": b"m", "leaf.txt": b"L2"})
        old_importations = _importations(("top.js", "mid.js"), ("mid.js", "leaf.txt"))

        plan = select_rebuild_set({"leaf.txt": new["leaf.txt"]}, new, old_importations)

        assert set(plan.files) == {"leaf.txt", "mid.js"}
        assert "top.js" not in plan

    def test_removed_importer_is_tombstoned(self):
        # a.js imported banner.txt and is now gone
        new = Snapshot({"banner.txt": b"NEW"})
        old_importations = _importations(("a.js", "banner.txt"))

        plan = select_rebuild_set({"banner.txt": new["banner.txt"], "a.js": TOMBSTONE}, new, old_importations)

        assert plan.files["a.js"] is TOMBSTONE
        assert list(plan.to_dispatch()) == [("banner.txt", b"NEW")]

    def test_removed_importee_rebuilds_importer(self):
        new = Snapshot({"a.js": b"a"})
        old_importations = _importations(("a.js", "banner.txt"))

        plan = select_rebuild_set({"banner.txt": TOMBSTONE}, new, old_importations)

        assert dict(plan.to_dispatch()) == {"a.js": b"a"}

    def test_summary(self):
        new = Snapshot({"a.js": b"a", "banner.txt": b"b"})
        plan = select_rebuild_set({"banner.txt": new["banner.txt"]}, new, _importations(("a.js", "banner.txt")))

        assert plan.summary() == "2 to build: 1 changed, 1 via imports"
        assert len(plan) == 2
