"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest


@pytest.fixture
def sample_timestamp() -> datetime:
    """A fixed timestamp with a millisecond part."""
    return datetime(2021, 3, 14, 15, 9, 26, 535000)


@pytest.fixture
def nested_tree(tmp_path: Path) -> tuple[Path, set[Path]]:
    """Folder tree three levels deep, with the set of files inside it."""
    root = tmp_path / "tree"
    (root / "a" / "b" / "c").mkdir(parents=True)
    (root / "empty").mkdir()

    files = {
        root / "top.txt",
        root / "a" / "one.csv",
        root / "a" / "b" / "two.csv",
        root / "a" / "b" / "c" / "three.bin",
        root / "a" / "b" / "c" / "four.bin",
    }
    for path in files:
        path.write_text(path.name)

    return root, files
