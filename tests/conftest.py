"""Shared fixtures: template trees written to tmp_path and a scripted prompter."""

from collections.abc import Callable
from pathlib import Path
from typing import Optional, Sequence

import pytest


def write_tree(base: Path, tree: dict) -> Path:
    """
    Create files and directories from a nested dict.

    str values become UTF-8 files, bytes values binary files, dict values
    directories.
    """
    base.mkdir(parents=True, exist_ok=True)
    for name, value in tree.items():
        path = base / name
        if isinstance(value, dict):
            write_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value, encoding="utf-8")
    return base


def read_tree(base: Path) -> dict:
    """Inverse of write_tree; text files are read back as str when valid UTF-8."""
    out: dict = {}
    for path in sorted(base.iterdir()):
        if path.is_dir():
            out[path.name] = read_tree(path)
        else:
            data = path.read_bytes()
            try:
                out[path.name] = data.decode("utf-8")
            except UnicodeDecodeError:
                out[path.name] = data
    return out


class ScriptedPrompter:
    """Answers prompts from fixed data; None answers cancel."""

    def __init__(self, template: Optional[str] = None, values: Optional[dict] = None, cancel_on: Optional[str] = None):
        self.template = template
        self.values = values or {}
        self.cancel_on = cancel_on
        self.template_choices: list[Sequence[str]] = []
        self.asked: list[tuple[str, str]] = []

    def choose_template(self, names: Sequence[str]) -> Optional[str]:
        self.template_choices.append(list(names))
        return self.template

    def ask_value(self, key: str, default: str) -> Optional[str]:
        self.asked.append((key, default))
        if key == self.cancel_on:
            return None
        return self.values.get(key, default)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[str, dict], Path]:
    def _make(rel: str, tree: dict) -> Path:
        return write_tree(tmp_path / rel, tree)

    return _make


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    A project with a .templates root holding:
    - component: __name__.ts + include of (common)
    - (common): hidden README fragment
    - plain: no placeholders
    """
    root = tmp_path / "project"
    write_tree(
        root / ".templates",
        {
            "component": {
                "__name__.ts": "class __NameCase__ {}\n",
                "__INCLUDE__((common))": {},
            },
            "(common)": {"README.md": "# __Name__\n"},
            "plain": {"notes.txt": "nothing to see\n"},
            ".git": {"HEAD": "ref"},
        },
    )
    return root
