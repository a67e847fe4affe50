"""
Tests for DuplicateService — group bookkeeping after removal and undo.
"""
from dupfinder.core.models import DuplicateGroup, FileRecord
from dupfinder.services.duplicate_service import DuplicateService


def make_groups():
    g1 = DuplicateGroup(files=[FileRecord(path=p, size=100) for p in ("/a1", "/a2", "/a3")], size_per_file=100)
    g2 = DuplicateGroup(files=[FileRecord(path=p, size=50) for p in ("/b1", "/b2")], size_per_file=50)
    return [g1, g2]


def paths(groups):
    return [[f.path for f in g.files] for g in groups]


class TestSummaries:

    def test_summarize(self):
        assert DuplicateService.summarize(make_groups()) == (5, 250)

    def test_files_to_remove(self):
        groups = make_groups()
        groups[0].files[0].kept = True
        groups[1].files[1].kept = True
        assert [f.path for f in DuplicateService.files_to_remove(groups)] == ["/a2", "/a3", "/b1"]

    def test_copy_groups_is_independent(self):
        groups = make_groups()
        copies = DuplicateService.copy_groups(groups)
        copies[0].files[0].kept = True
        assert not groups[0].files[0].kept
        assert copies[0].id == groups[0].id
        assert copies[0].files[0].id == groups[0].files[0].id


class TestRemoveFilesFromGroups:

    def test_drops_removed_files_and_small_groups(self):
        groups = make_groups()
        updated = DuplicateService.remove_files_from_groups(groups, ["/a2", "/b1"])
        assert paths(updated) == [["/a1", "/a3"]]
        assert updated[0].id == groups[0].id

    def test_input_is_not_mutated(self):
        groups = make_groups()
        DuplicateService.remove_files_from_groups(groups, ["/a1"])
        assert paths(groups) == [["/a1", "/a2", "/a3"], ["/b1", "/b2"]]


class TestRestoreFilesToGroups:

    def test_restored_files_rejoin_their_groups(self):
        before = make_groups()
        rebuilt = DuplicateService.restore_files_to_groups(before, ["/a2", "/b1"], ["/a2", "/b1"])

        assert paths(rebuilt) == paths(before)
        assert [g.id for g in rebuilt] == [g.id for g in before]

    def test_partial_restore(self):
        before = make_groups()
        rebuilt = DuplicateService.restore_files_to_groups(before, ["/a2", "/b1"], ["/a2"])

        assert paths(rebuilt) == [["/a1", "/a2", "/a3"]]
