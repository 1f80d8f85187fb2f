import logging
import os
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import yaml

from .errors import ErrorCodes, ScaffoldError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".faftemplate.yaml"
DEFAULT_TEMPLATES_DIRNAME = ".templates"


class Config(NamedTuple):
    template_paths: List[str]
    ignore: List[str]


def _load_yaml(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _string_list(data: Dict[str, Any], key: str, path: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ScaffoldError(ErrorCodes.INVALID_CONFIG, path=path, key=key, reason="expected a list of strings")
    return list(value)


def load_config(project_root: Path) -> Config:
    """
    Load .faftemplate.yaml from the project root.

    Recognised keys:
    - template_paths: extra template roots, relative to the project root
    - ignore: full placeholder tokens that are never substituted (e.g. "__init__")
    """
    path = os.path.join(project_root, CONFIG_FILENAME)
    if not os.path.isfile(path):
        return Config(template_paths=[], ignore=[])
    try:
        data = _load_yaml(path)
    except yaml.YAMLError as e:
        raise ScaffoldError(ErrorCodes.INVALID_CONFIG, path=path, reason=str(e)) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ScaffoldError(ErrorCodes.INVALID_CONFIG, path=path, reason="top level must be a mapping")
    return Config(
        template_paths=_string_list(data, "template_paths", path),
        ignore=_string_list(data, "ignore", path),
    )


def discover_template_roots(
    project_root: Path,
    template_paths: Optional[Sequence[str]] = None,
) -> List[Path]:
    """
    Ordered, existing template roots: the given paths, then <root>/.templates.

    Relative paths resolve against the project root. A directory listed twice
    is kept at its first position.
    """
    candidates = list(template_paths or [])
    candidates.append(DEFAULT_TEMPLATES_DIRNAME)

    roots: List[Path] = []
    seen = set()
    for rel in candidates:
        abs_path = os.path.abspath(os.path.join(project_root, os.path.expanduser(rel)))
        if not os.path.isdir(abs_path):
            logger.debug("Template path %s does not exist, skipped", abs_path)
            continue
        key = os.path.realpath(abs_path)
        if key in seen:
            continue
        seen.add(key)
        roots.append(Path(abs_path))
    return roots
