"""
Tests for usysconf.core.state module.

Tests cover:
- Staleness checks against recorded fingerprints
- Loading missing / corrupt / foreign state files
- Atomic writes and pruning of paths not seen this run
"""

import json
from unittest.mock import patch

import pytest

from usysconf.core.errors import StateLoadError, StateRecordError, StateWriteError
from usysconf.core.state import STATE_VERSION, StateTracker


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "state" / "status.json"


@pytest.fixture
def tracker(state_file):
    return StateTracker(state_file)


class TestNeedsUpdate:
    def test_unknown_path_needs_update(self, tracker, conf_tree):
        assert tracker.needs_update(str(conf_tree / "a.conf"))

    def test_pushed_path_is_current(self, tracker, conf_tree):
        path = str(conf_tree / "a.conf")
        tracker.push_path(path)
        assert not tracker.needs_update(path)

    def test_modified_path_needs_update(self, tracker, conf_tree):
        target = conf_tree / "a.conf"
        tracker.push_path(str(target))
        target.write_text("rewritten with new content\n")
        assert tracker.needs_update(str(target))

    def test_vanished_path_needs_update(self, tracker, conf_tree):
        target = conf_tree / "a.conf"
        tracker.push_path(str(target))
        target.unlink()
        assert tracker.needs_update(str(target))

    def test_keys_are_normalized(self, tracker, conf_tree):
        tracker.push_path(f"{conf_tree}/")
        assert str(conf_tree) in tracker
        assert not tracker.needs_update(str(conf_tree))


class TestPushPath:
    def test_missing_path_raises(self, tracker, tmp_path):
        with pytest.raises(StateRecordError) as exc_info:
            tracker.push_path(str(tmp_path / "missing"))
        assert exc_info.value.context.path == str(tmp_path / "missing")
        assert len(tracker) == 0


class TestLoad:
    def test_missing_file(self, tracker):
        with pytest.raises(StateLoadError) as exc_info:
            tracker.load()
        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert len(tracker) == 0

    def test_corrupt_file_leaves_tracker_empty(self, tracker, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text("{not json")
        with pytest.raises(StateLoadError, match="Invalid state"):
            tracker.load()
        assert len(tracker) == 0

    def test_wrong_shape(self, tracker, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text(json.dumps({"version": 1, "entries": ["a", "b"]}))
        with pytest.raises(StateLoadError):
            tracker.load()

    def test_foreign_version(self, tracker, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text(json.dumps({"version": STATE_VERSION + 1, "entries": {}}))
        with pytest.raises(StateLoadError, match="Unsupported state version"):
            tracker.load()
        assert len(tracker) == 0

    def test_load_discards_previous_entries(self, tracker, state_file, conf_tree):
        tracker.push_path(str(conf_tree / "a.conf"))
        tracker.write()
        other = StateTracker(state_file)
        other.push_path(str(conf_tree / "b.conf"))
        other.load()
        assert str(conf_tree / "a.conf") in other
        assert str(conf_tree / "b.conf") not in other


class TestWrite:
    def test_round_trip(self, tracker, state_file, conf_tree):
        for name in ("a.conf", "b.conf"):
            tracker.push_path(str(conf_tree / name))
        tracker.write()

        reloaded = StateTracker(state_file)
        reloaded.load()
        assert len(reloaded) == 2
        assert not reloaded.needs_update(str(conf_tree / "a.conf"))

    def test_document_layout(self, tracker, state_file, conf_tree):
        tracker.push_path(str(conf_tree / "a.conf"))
        tracker.write()
        document = json.loads(state_file.read_text())
        assert document["version"] == STATE_VERSION
        assert list(document["entries"]) == [str(conf_tree / "a.conf")]

    def test_prune_drops_unseen_paths(self, tracker, state_file, conf_tree):
        for name in ("a.conf", "b.conf"):
            tracker.push_path(str(conf_tree / name))
        tracker.write()

        second = StateTracker(state_file)
        second.load()
        assert not second.needs_update(str(conf_tree / "a.conf"))
        second.write(prune=True)

        assert list(json.loads(state_file.read_text())["entries"]) == [str(conf_tree / "a.conf")]

    def test_no_prune_carries_entries_forward(self, tracker, state_file, conf_tree):
        for name in ("a.conf", "b.conf"):
            tracker.push_path(str(conf_tree / name))
        tracker.write()

        second = StateTracker(state_file)
        second.load()
        second.write(prune=False)

        assert len(json.loads(state_file.read_text())["entries"]) == 2

    def test_recorded_paths(self, tracker, conf_tree):
        tracker.push_path(str(conf_tree / "b.conf"))
        tracker.push_path(str(conf_tree / "a.conf"))
        assert tracker.recorded_paths() == [str(conf_tree / "a.conf"), str(conf_tree / "b.conf")]

    def test_unwritable_directory(self, tmp_path, conf_tree):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        tracker = StateTracker(blocker / "status.json")
        tracker.push_path(str(conf_tree / "a.conf"))
        with pytest.raises(StateWriteError):
            tracker.write()

    def test_failed_replace_keeps_old_file_and_cleans_up(self, tracker, state_file, conf_tree):
        tracker.push_path(str(conf_tree / "a.conf"))
        tracker.write()
        before = state_file.read_text()

        tracker.push_path(str(conf_tree / "b.conf"))
        with patch("usysconf.core.state.os.replace", side_effect=OSError("EXDEV")):
            with pytest.raises(StateWriteError):
                tracker.write()

        assert state_file.read_text() == before
        assert [p.name for p in state_file.parent.iterdir()] == ["status.json"]
