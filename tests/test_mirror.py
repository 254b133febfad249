import json

from conftest import make_entry

from toolshelf.mirror import LocalMirror


def test_save_writes_under_fixed_key(tmp_path):
    path = tmp_path / "mirror.json"
    path.write_text(json.dumps({"theme": "dark"}))
    mirror = LocalMirror(path)

    assert mirror.save([make_entry("a", name="Alpha")])

    data = json.loads(path.read_text())
    assert data["theme"] == "dark"
    assert data["tools"][0]["id"] == "a"
    assert "dateAdded" in data["tools"][0]


def test_unwritable_mirror_is_not_fatal(tmp_path):
    mirror = LocalMirror(tmp_path / "missing-dir" / "mirror.json")
    assert mirror.save([make_entry("a")]) is False
    assert mirror.load() == []


def test_corrupt_mirror_loads_empty(tmp_path):
    path = tmp_path / "mirror.json"
    path.write_text("[[[")
    assert LocalMirror(path).load() == []
