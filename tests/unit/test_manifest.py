"""Unit tests for ManifestStore."""

from __future__ import annotations

import json
import threading

from bento.core.manifest import MANIFEST_FILENAME, ManifestStore
from bento.models.artifacts import Artifact


def _js(base: str) -> Artifact:
    return Artifact(unminified=f"{base}.js", minified=f"{base}.min.js")


class TestRecord:

    def test_record_and_get(self):
        store = ManifestStore()
        store.record("main.js", _js("main"), entry_name="admin")
        assert store.get("main.js") == _js("main")
        assert store.owner("main.js") == "admin"
        assert "main.js" in store
        assert len(store) == 1

    def test_last_write_wins(self):
        store = ManifestStore()
        store.record("app.js", _js("app"), entry_name="admin")
        store.record("app.js", Artifact(unminified="x.js", minified="x.min.js"), entry_name="frontend")
        assert store.get("app.js").unminified == "x.js"
        assert store.owner("app.js") == "frontend"
        assert len(store) == 1

    def test_remove(self):
        store = ManifestStore()
        store.record("a.js", _js("a"), entry_name="admin")
        assert store.remove("a.js") == _js("a")
        assert store.remove("a.js") is None
        assert store.owner("a.js") is None

    def test_reset(self):
        store = ManifestStore()
        store.record("a.js", _js("a"))
        store.reset()
        assert len(store) == 0

    def test_snapshot_is_a_copy(self):
        store = ManifestStore()
        store.record("a.js", _js("a"))
        snap = store.snapshot()
        snap.clear()
        assert len(store) == 1

    def test_concurrent_records(self):
        store = ManifestStore()

        def _worker(offset: int) -> None:
            for i in range(200):
                store.record(f"f{offset}-{i}.js", _js(f"f{offset}-{i}"))

        threads = [threading.Thread(target=_worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store) == 800


class TestPersistence:

    def test_serialize_shape_and_order(self):
        store = ManifestStore()
        store.record("sub/z.js", _js("sub/z"))
        store.record("a.css", Artifact(unminified="a.css", minified="a.min.css"))
        text = store.serialize()
        assert text.endswith("\n")
        data = json.loads(text)
        assert list(data) == ["a.css", "sub/z.js"]
        assert data["sub/z.js"] == {"unminified": "sub/z.js", "minified": "sub/z.min.js"}

    def test_serialize_is_deterministic(self):
        first, second = ManifestStore(), ManifestStore()
        for key in ("b.js", "a.js", "c.js"):
            first.record(key, _js(key[:-3]))
        for key in ("c.js", "a.js", "b.js"):
            second.record(key, _js(key[:-3]))
        assert first.serialize() == second.serialize()

    def test_empty_manifest(self):
        assert json.loads(ManifestStore().serialize()) == {}

    def test_write_creates_and_overwrites(self, tmp_path):
        store = ManifestStore()
        store.record("a.js", _js("a"))
        path = store.write(tmp_path / "public")
        assert path == tmp_path / "public" / MANIFEST_FILENAME
        store.remove("a.js")
        store.write(tmp_path / "public")
        assert json.loads(path.read_text(encoding="utf-8")) == {}

    def test_load_round_trip(self, tmp_path):
        store = ManifestStore()
        store.record("a.js", _js("a"))
        store.record("b.css", Artifact(unminified="b.css", minified="b.min.css"))
        store.write(tmp_path)

        fresh = ManifestStore()
        assert fresh.load(tmp_path) == 2
        assert fresh.snapshot() == store.snapshot()

    def test_load_missing_file(self, tmp_path):
        assert ManifestStore().load(tmp_path) == 0

    def test_load_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")
        store = ManifestStore()
        assert store.load(tmp_path) == 0
        assert len(store) == 0

    def test_load_wrong_shape_is_ignored(self, tmp_path):
        (tmp_path / MANIFEST_FILENAME).write_text('["a", "b"]', encoding="utf-8")
        assert ManifestStore().load(tmp_path) == 0

    def test_load_invalid_entry_is_ignored(self, tmp_path):
        (tmp_path / MANIFEST_FILENAME).write_text('{"a.js": {"unminified": "a.js"}}', encoding="utf-8")
        assert ManifestStore().load(tmp_path) == 0
