"""Tests for the ingestion entry points."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from treedigest import ingest, ingest_directory, ingest_file, ingest_local, ingest_remote
from treedigest.clone import CloneConfig
from treedigest.exceptions import (
    CloneError,
    EmptyRepositoryPathError,
    InvalidPatternError,
    MaxFileSizeReachedError,
    NoFilesFoundError,
    RepositoryNotFoundError,
    RepositoryTooLargeError,
)
from treedigest.ingestion import directory_size, is_remote_source
from treedigest.query import parse_query

SEP = "=" * 80


def _make_project(root: Path) -> None:
    (root / "README.md").write_text("hi")
    (root / "a.bin").write_bytes(b"ab\x00cd")
    (root / "b.txt").write_text("hello")


def test_ingest_round_trip(tmp_path: Path):
    _make_project(tmp_path)
    result = ingest_local(tmp_path, ["*.bin"])

    assert result.structure == f"└── {tmp_path.name}\n    ├── README.md\n    └── b.txt"
    readme = os.path.join(str(tmp_path), "README.md").replace("\\", "/")
    b_txt = os.path.join(str(tmp_path), "b.txt").replace("\\", "/")
    assert result.content == f"{SEP}\n{readme}\n{SEP}\nhi\n\n{SEP}\n{b_txt}\n{SEP}\nhello\n"
    assert "Total files analyzed: 2" in result.summary
    assert "  *.bin" in result.summary.split("\n")


def test_ingest_binary_file_listed_but_not_in_content(tmp_path: Path):
    _make_project(tmp_path)
    result = ingest_local(tmp_path)
    assert "a.bin" in result.structure
    assert "a.bin" not in result.content
    assert "Total files analyzed: 3" in result.summary


def test_ingest_digest_joins_sections(tmp_path: Path):
    _make_project(tmp_path)
    result = ingest_local(tmp_path)
    assert result.digest == f"{result.summary}\n\n{result.structure}\n\n{result.content}"


def test_ingest_local_missing_path(tmp_path: Path):
    with pytest.raises(RepositoryNotFoundError):
        ingest_local(tmp_path / "missing")


def test_ingest_local_empty_path():
    with pytest.raises(EmptyRepositoryPathError):
        ingest_local("")


def test_ingest_local_invalid_pattern(tmp_path: Path):
    with pytest.raises(InvalidPatternError):
        ingest_local(tmp_path, ["ok/*"], ["no spaces"])


def test_ingest_local_too_large(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _make_project(tmp_path)
    monkeypatch.setattr("treedigest.ingestion.directory_size", lambda path: 600 * 1024 * 1024)
    with pytest.raises(RepositoryTooLargeError, match=r"Repository size \(600.0MB\)"):
        ingest_local(tmp_path)


def test_ingest_local_max_file_size(tmp_path: Path):
    (tmp_path / "big.txt").write_text("x" * 200)
    with pytest.raises(MaxFileSizeReachedError):
        ingest_local(tmp_path, max_file_size=100)


def test_directory_size_counts_regular_files(tmp_path: Path):
    (tmp_path / "a").write_bytes(b"12345")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b").write_bytes(b"123")
    assert directory_size(tmp_path) == 8


def test_ingest_directory_no_tree(tmp_path: Path):
    with pytest.raises(NoFilesFoundError):
        ingest_directory(parse_query(str(tmp_path / "missing")))


def test_ingest_single_file(tmp_path: Path):
    target = tmp_path / "notes.txt"
    target.write_text("some notes")
    result = ingest_local(target)
    assert result.structure == "└── notes.txt"
    assert result.content == "some notes"
    assert "Total files analyzed: 1" in result.summary


def test_ingest_file_binary_has_empty_content(tmp_path: Path):
    target = tmp_path / "blob.dat"
    target.write_bytes(b"\x00\x01\x02")
    result = ingest_file(parse_query(str(target)))
    assert result.content == ""
    assert result.structure == "└── blob.dat"


def test_ingest_file_too_large(tmp_path: Path):
    target = tmp_path / "big.txt"
    target.write_text("x" * 20)
    with pytest.raises(MaxFileSizeReachedError):
        ingest_file(parse_query(str(target), max_file_size=10))


def test_is_remote_source():
    assert is_remote_source("https://github.com/user/repo")
    assert is_remote_source("http://example.com/repo.git")
    assert is_remote_source("git://example.com/repo.git")
    assert is_remote_source("ssh://git@example.com/repo.git")
    assert not is_remote_source("git@github.com:user/repo.git")
    assert not is_remote_source("./local/path")


def test_ingest_remote_cleans_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    seen: dict[str, object] = {}

    def fake_clone(url: str, target_dir: Path, config: CloneConfig | None = None) -> Path:
        seen["url"] = url
        seen["config"] = config
        target_dir.mkdir(parents=True)
        _make_project(target_dir)
        return target_dir

    monkeypatch.setattr("treedigest.ingestion.clone_repository", fake_clone)
    tmp_base = tmp_path / "clones"
    config = CloneConfig(branch="main")

    result = ingest_remote(
        "https://example.com/repo.git", ["*.bin"], clone_config=config, tmp_base=tmp_base
    )

    assert seen == {"url": "https://example.com/repo.git", "config": config}
    assert "Total files analyzed: 2" in result.summary
    assert "README.md" in result.content
    assert list(tmp_base.iterdir()) == []


def test_ingest_remote_cleans_up_on_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    def failing_clone(url: str, target_dir: Path, config: CloneConfig | None = None) -> Path:
        target_dir.mkdir(parents=True)
        raise CloneError("Failed to clone repository: boom")

    monkeypatch.setattr("treedigest.ingestion.clone_repository", failing_clone)
    tmp_base = tmp_path / "clones"

    with pytest.raises(CloneError, match="boom"):
        ingest_remote("https://example.com/repo.git", tmp_base=tmp_base)
    assert list(tmp_base.iterdir()) == []


def test_ingest_remote_cleans_up_on_ingest_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    def fake_clone(url: str, target_dir: Path, config: CloneConfig | None = None) -> Path:
        target_dir.mkdir(parents=True)
        (target_dir / "big.txt").write_text("x" * 50)
        return target_dir

    monkeypatch.setattr("treedigest.ingestion.clone_repository", fake_clone)
    tmp_base = tmp_path / "clones"

    with pytest.raises(MaxFileSizeReachedError):
        ingest_remote("https://example.com/repo.git", max_file_size=10, tmp_base=tmp_base)
    assert list(tmp_base.iterdir()) == []


def test_ingest_dispatches_by_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    calls: list[str] = []

    def fake_remote(url: str, *args: object, **kwargs: object) -> str:
        calls.append(url)
        return "remote"

    monkeypatch.setattr("treedigest.ingestion.ingest_remote", fake_remote)
    assert ingest("https://example.com/repo.git") == "remote"  # type: ignore[comparison-overlap]
    assert calls == ["https://example.com/repo.git"]

    _make_project(tmp_path)
    result = ingest(str(tmp_path))
    assert "README.md" in result.structure
    assert calls == ["https://example.com/repo.git"]
