from gating.kv_store import JsonFileStore, MemoryStore
from gating.errors import PersistenceUnavailable
from pathlib import Path
import json
import pytest


def test_missing_file_returns_defaults(tmp_path: Path):
    s = JsonFileStore(tmp_path, "journal")
    assert s.get("engagement.launchCount") is None
    assert s.get("engagement.launchCount", 0) == 0
    assert not s.path.exists()


def test_set_is_written_immediately(tmp_path: Path):
    s = JsonFileStore(tmp_path, "journal")
    s.set("engagement.launchCount", 4)
    # A second instance (next process) sees the value without any flush call
    again = JsonFileStore(tmp_path, "journal")
    assert again.get("engagement.launchCount") == 4
    assert json.loads(s.path.read_text(encoding="utf-8")) == {"engagement.launchCount": 4}
    assert not s.path.with_suffix(s.path.suffix + ".tmp").exists()


def test_namespaces_are_isolated(tmp_path: Path):
    a = JsonFileStore(tmp_path, "mood")
    b = JsonFileStore(tmp_path, "habits")
    a.set("gate.acknowledged", True)
    assert b.get("gate.acknowledged") is None


def test_delete_removes_key(tmp_path: Path):
    s = JsonFileStore(tmp_path, "journal")
    s.set("gate.acknowledged", True)
    s.delete("gate.acknowledged")
    s.delete("never.set")  # no-op
    assert JsonFileStore(tmp_path, "journal").get("gate.acknowledged") is None


def test_corrupt_file_is_moved_aside(tmp_path: Path):
    p = tmp_path / "journal.launch_state.json"
    p.write_text("{not json", encoding="utf-8")
    s = JsonFileStore(tmp_path, "journal")
    assert s.get("engagement.launchCount") is None
    backups = list(tmp_path.glob("journal.launch_state.json.corrupt.*"))
    assert len(backups) == 1
    s.set("engagement.launchCount", 1)
    assert JsonFileStore(tmp_path, "journal").get("engagement.launchCount") == 1


def test_non_object_json_treated_as_corrupt(tmp_path: Path):
    (tmp_path / "journal.launch_state.json").write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStore(tmp_path, "journal").as_dict() == {}


def test_invalid_utf8_file_is_moved_aside(tmp_path: Path):
    p = tmp_path / "journal.launch_state.json"
    p.write_bytes(b'{"engagement.launchCount": 7, "x": "\xff\xfe"}')
    s = JsonFileStore(tmp_path, "journal")
    assert s.get("engagement.launchCount") is None
    assert len(list(tmp_path.glob("journal.launch_state.json.corrupt.*"))) == 1
    s.set("engagement.launchCount", 1)
    assert json.loads(p.read_text(encoding="utf-8")) == {"engagement.launchCount": 1}


def test_unwritable_location_raises_persistence_unavailable(tmp_path: Path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    s = JsonFileStore(blocker, "journal")
    with pytest.raises(PersistenceUnavailable):
        s.set("engagement.launchCount", 1)


@pytest.mark.parametrize("bad", ["", "../escape", "a/b", ".hidden"])
def test_invalid_namespace_rejected(tmp_path: Path, bad):
    with pytest.raises(ValueError):
        JsonFileStore(tmp_path, bad)


def test_memory_store_counts_writes():
    s = MemoryStore({"gate.acknowledged": True})
    s.set("engagement.launchCount", 1)
    s.delete("gate.acknowledged")
    assert s.as_dict() == {"engagement.launchCount": 1}
    assert s.writes == 1
