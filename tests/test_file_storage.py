# tests/test_file_storage.py

from __future__ import annotations

import asyncio
import io
import os
import threading
import time

import pytest

from taskflow.models import Task, TaskAttachment
from taskflow.services import scheduler as scheduler_module
from taskflow.services.file_storage import FileStorageService, sanitize_filename
from taskflow.services.scheduler import StorageScheduler, sweep_orphaned_uploads
from taskflow.config import Settings
from taskflow.utils.errors import ValidationError


@pytest.mark.parametrize(
    "original, expected",
    [
        ("report.pdf", "report.pdf"),
        ("my  weekly report.pdf", "my_weekly_report.pdf"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\plan.docx", "plan.docx"),
        ("ré$umé?.txt", "r__um__.txt"),
        (".hidden", "hidden"),
        ("", "file"),
    ],
)
def test_sanitize_filename(original: str, expected: str) -> None:
    assert sanitize_filename(original) == expected


def test_generated_names_are_unique_and_keep_original(storage: FileStorageService) -> None:
    names = {storage.generate_unique_filename("a b.txt") for _ in range(50)}

    assert len(names) == 50
    for name in names:
        timestamp, token, rest = name.split("-", 2)
        assert timestamp.isdigit()
        assert len(token) == 8
        assert rest == "a_b.txt"


def test_save_and_delete_file(storage: FileStorageService) -> None:
    stored_name, size = storage.save_file(io.BytesIO(b"contents"), "notes.txt")
    web_path = storage.web_path(stored_name)

    assert size == 8
    assert web_path == f"uploads/{stored_name}"
    assert storage.resolve(web_path).read_bytes() == b"contents"

    assert storage.delete_file(web_path) is True
    # Deleting again is not an error
    assert storage.delete_file(web_path) is False


def test_oversized_file_is_removed(tmp_path) -> None:
    storage = FileStorageService(str(tmp_path / "up"), max_file_size=4)

    with pytest.raises(ValidationError):
        storage.save_file(io.BytesIO(b"too large"), "big.bin")

    assert list(storage.upload_dir.iterdir()) == []


@pytest.mark.parametrize("web_path", ["uploads/../secret.txt", "../outside.txt", "uploads/", "/etc/passwd"])
def test_resolve_refuses_paths_outside_upload_dir(storage: FileStorageService, web_path: str) -> None:
    assert storage.resolve(web_path) is None
    assert storage.delete_file(web_path) is False


def _age(path, seconds: int) -> None:
    old = time.time() - seconds
    os.utime(path, (old, old))


def test_cleanup_orphaned_files(storage: FileStorageService) -> None:
    kept, _ = storage.save_file(io.BytesIO(b"kept"), "kept.txt")
    orphan, _ = storage.save_file(io.BytesIO(b"orphan"), "orphan.txt")
    fresh, _ = storage.save_file(io.BytesIO(b"fresh"), "fresh.txt")
    for name in (kept, orphan):
        _age(storage.upload_dir / name, 7200)

    removed = storage.cleanup_orphaned_files([storage.web_path(kept)], min_age_seconds=3600)

    assert removed == 1
    remaining = {p.name for p in storage.upload_dir.iterdir()}
    assert remaining == {kept, fresh}


def test_sweep_orphaned_uploads_uses_recorded_attachments(db, storage: FileStorageService) -> None:
    recorded, _ = storage.save_file(io.BytesIO(b"recorded"), "recorded.txt")
    stray, _ = storage.save_file(io.BytesIO(b"stray"), "stray.txt")
    _age(storage.upload_dir / stray, 60)

    task = Task(title="With file")
    task.attachments.append(TaskAttachment(file_name="recorded.txt", file_path=storage.web_path(recorded)))
    db.add(task)
    db.commit()

    assert sweep_orphaned_uploads(db, storage, min_age_seconds=0) == 1
    assert {p.name for p in storage.upload_dir.iterdir()} == {recorded}
    assert stray not in {p.name for p in storage.upload_dir.iterdir()}


def test_scheduler_stays_stopped_when_sweep_disabled() -> None:
    scheduler = StorageScheduler(Settings(orphan_sweep_minutes=0))

    scheduler.start()

    assert scheduler.is_running is False
    assert scheduler.get_status() == {"status": "stopped", "jobs": []}


@pytest.mark.parametrize(
    "original, expected",
    [
        ("b" * 300 + ".docx", "b" * 195 + ".docx"),
        ("c" * 300, "c" * 200),
        ("d" * 250 + "." + "e" * 40, ("d" * 250 + "." + "e" * 40)[:200]),
    ],
)
def test_sanitize_filename_truncates_long_names(original: str, expected: str) -> None:
    assert sanitize_filename(original) == expected


def test_scheduled_sweep_runs_in_worker_thread(monkeypatch, session_factory, storage: FileStorageService) -> None:
    stray, _ = storage.save_file(io.BytesIO(b"stray"), "stray.txt")
    _age(storage.upload_dir / stray, 7200)
    threads = []

    def sweep(db, storage, min_age_seconds):
        threads.append(threading.current_thread())
        return sweep_orphaned_uploads(db, storage, min_age_seconds)

    monkeypatch.setattr(scheduler_module, "SessionLocal", session_factory)
    monkeypatch.setattr(scheduler_module, "get_file_storage", lambda: storage)
    monkeypatch.setattr(scheduler_module, "sweep_orphaned_uploads", sweep)
    scheduler = StorageScheduler(Settings(orphan_min_age_seconds=3600))

    assert asyncio.run(scheduler.run_orphan_sweep()) == 1
    assert threads and threads[0] is not threading.main_thread()
    assert list(storage.upload_dir.iterdir()) == []
