"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from linkmirror.core.patterns import PatternSet

TreeBuilder = Callable[[Path, dict[str, str | None]], Path]
Snapshot = Callable[[Path], dict[str, str]]


@pytest.fixture(autouse=True)
def isolated_config_home(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point XDG_CONFIG_HOME at an empty temporary directory."""
    config_home = tmp_path_factory.mktemp("xdg_config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def make_tree() -> TreeBuilder:
    """Build a directory tree from a mapping of relative paths.

    Keys ending in "/" (or mapped to None) are directories, everything
    else is a file with the given text content.
    """

    def _make(root: Path, entries: dict[str, str | None]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in entries.items():
            target = root / rel
            if rel.endswith("/") or content is None:
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        return root

    return _make


@pytest.fixture
def snapshot() -> Snapshot:
    """Describe every entry under a root without following links."""

    def _snapshot(root: Path) -> dict[str, str]:
        result: dict[str, str] = {}
        if not os.path.lexists(root):
            return result
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            for name in dirnames + filenames:
                entry = current / name
                rel = entry.relative_to(root).as_posix()
                if entry.is_symlink():
                    result[rel] = f"link:{os.readlink(entry)}"
                elif entry.is_dir():
                    result[rel] = "dir"
                else:
                    result[rel] = f"file:{entry.read_text(errors='replace')}"
        return result

    return _snapshot


@pytest.fixture
def default_patterns() -> PatternSet:
    """Exclude rules commonly found in development trees, no protect rules."""
    return PatternSet.from_lines(["node_modules", ".git", "*.tmp", "~$*"])


@pytest.fixture
def source_tree(tmp_path: Path, make_tree: TreeBuilder) -> Path:
    """Source root with one clean and one mixed project."""
    return make_tree(
        tmp_path / "src",
        {
            "clean/readme.md": "# clean",
            "clean/docs/guide.md": "guide",
            "mixed/package.json": "{}",
            "mixed/node_modules/lib/index.js": "module.exports = 1",
            "mixed/src/app.js": "console.log(1)",
            "mixed/assets/": None,
        },
    )
