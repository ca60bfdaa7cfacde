import json

from backend.app.progress import JsonFileStorage, MemoryStorage, ProgressTracker, percent_complete


def test_percent_is_zero_without_lessons():
    tracker = ProgressTracker(MemoryStorage())
    tracker.mark_completed(1)
    assert tracker.percent(0) == 0


def test_percent_reaches_hundred_when_all_completed():
    tracker = ProgressTracker(MemoryStorage())
    for lesson_id in (1, 2, 3):
        tracker.mark_completed(lesson_id)
    assert tracker.percent(3) == 100


def test_percent_rounds_and_clamps():
    assert percent_complete(1, 3) == 33
    assert percent_complete(2, 3) == 67
    assert percent_complete(5, 3) == 100


def test_mark_completed_is_idempotent():
    storage = MemoryStorage()
    tracker = ProgressTracker(storage)
    tracker.mark_completed(4)
    tracker.mark_completed(4)
    assert tracker.completed == [4]
    assert json.loads(storage.get("lesson-progress")) == [4]


def test_progress_is_written_back_and_reloaded():
    storage = MemoryStorage()
    ProgressTracker(storage).mark_completed(2)
    reloaded = ProgressTracker(storage)
    assert reloaded.is_completed(2)
    assert not reloaded.is_completed(3)


def test_corrupt_record_starts_empty():
    for raw in ("{not json", '{"a": 1}', '["x", 2]', "[true]"):
        tracker = ProgressTracker(MemoryStorage({"lesson-progress": raw}))
        assert tracker.completed == []


def test_custom_storage_key():
    storage = MemoryStorage({"other": "[7]"})
    assert ProgressTracker(storage, key="other").completed == [7]
    assert ProgressTracker(storage).completed == []


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "progress.json"
    tracker = ProgressTracker(JsonFileStorage(path))
    tracker.mark_completed(3)
    tracker.mark_completed(1)
    assert json.loads(path.read_text()) == {"lesson-progress": "[1, 3]"}
    assert ProgressTracker(JsonFileStorage(path)).completed == [1, 3]


def test_json_file_storage_tolerates_garbage(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text("garbage")
    tracker = ProgressTracker(JsonFileStorage(path))
    assert tracker.completed == []
    tracker.mark_completed(9)
    assert ProgressTracker(JsonFileStorage(path)).completed == [9]


def test_browser_store_shares_storage_key_and_zero_guard(client):
    from backend.app.config import PROGRESS_STORAGE_KEY

    res = client.get("/core/progress.js")
    assert res.status_code == 200
    script = res.text
    assert f'var STORAGE_KEY = "{PROGRESS_STORAGE_KEY}";' in script
    assert "if (!total || total <= 0) return 0;" in script
    assert "Number.isInteger" in script
