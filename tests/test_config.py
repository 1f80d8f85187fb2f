"""
test_config.py - .faftemplate.yaml loading and template root discovery
"""

from pathlib import Path

import pytest
import yaml

from faftemplate_lib.config import CONFIG_FILENAME, discover_template_roots, load_config
from faftemplate_lib.errors import ErrorCodes, ScaffoldError


def _write_config(root: Path, data) -> None:
    root.mkdir(parents=True, exist_ok=True)
    with open(root / CONFIG_FILENAME, "w", encoding="utf-8") as f:
        yaml.dump(data, f)


class TestLoadConfig:
    def test_missing_file_defaults(self, tmp_path: Path):
        config = load_config(tmp_path)
        assert config.template_paths == []
        assert config.ignore == []

    def test_reads_keys(self, tmp_path: Path):
        _write_config(tmp_path, {"template_paths": ["shared/templates"], "ignore": ["__init__"]})
        config = load_config(tmp_path)
        assert config.template_paths == ["shared/templates"]
        assert config.ignore == ["__init__"]

    def test_empty_file(self, tmp_path: Path):
        (tmp_path / CONFIG_FILENAME).write_text("", encoding="utf-8")
        assert load_config(tmp_path).template_paths == []

    @pytest.mark.parametrize(
        "content",
        [
            "- just\n- a list\n",
            "template_paths: not-a-list\n",
            "ignore: [1, 2]\n",
            "template_paths: [unclosed\n",
        ],
    )
    def test_invalid(self, tmp_path: Path, content: str):
        (tmp_path / CONFIG_FILENAME).write_text(content, encoding="utf-8")
        with pytest.raises(ScaffoldError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCodes.INVALID_CONFIG


class TestDiscoverTemplateRoots:
    def test_configured_before_default(self, tmp_path: Path):
        (tmp_path / ".templates").mkdir()
        (tmp_path / "extra").mkdir()
        roots = discover_template_roots(tmp_path, ["extra"])
        assert roots == [tmp_path / "extra", tmp_path / ".templates"]

    def test_missing_paths_skipped(self, tmp_path: Path):
        assert discover_template_roots(tmp_path, ["absent"]) == []

    def test_absolute_and_duplicate(self, tmp_path: Path):
        (tmp_path / ".templates").mkdir()
        roots = discover_template_roots(tmp_path, [str(tmp_path / ".templates"), ".templates"])
        assert roots == [tmp_path / ".templates"]
