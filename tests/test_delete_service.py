"""Tests for moving files to the trash."""

from __future__ import annotations

from pathlib import Path

from infrastructure import delete_service
from infrastructure.delete_service import DeleteService


def test_missing_file_is_reported(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(delete_service, "send2trash", lambda p: None)

    success, failed = DeleteService().delete_to_trash([str(tmp_path / "gone.jpg")])

    assert success == []
    assert failed == [(str(tmp_path / "gone.jpg"), "File does not exist")]


def test_falls_back_to_absolute_path(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "a.jpg"
    target.write_bytes(b"x")
    calls: list[str] = []

    def flaky(path: str) -> None:
        calls.append(path)
        if len(calls) == 1:
            raise OSError("trash unavailable")

    monkeypatch.setattr(delete_service, "send2trash", flaky)

    success, failed = DeleteService().delete_to_trash([str(target)])

    assert success == [str(target)]
    assert failed == []
    assert len(calls) == 2


def test_reports_failure_when_every_attempt_fails(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "a.jpg"
    target.write_bytes(b"x")

    def broken(path: str) -> None:
        raise OSError("no trash")

    monkeypatch.setattr(delete_service, "send2trash", broken)

    success, failed = DeleteService().delete_to_trash([str(target)])

    assert success == []
    assert failed[0][0] == str(target)
    assert "no trash" in failed[0][1]
    assert target.exists()
