"""
A scaffolding run: pick a template, ask for each logical variable, copy.

Interaction goes through a Prompter, so the run can be driven by a console,
an editor integration or a test script. Every prompt happens before the first
destination write; a cancelled prompt leaves the destination untouched.
"""
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Set, TextIO

from .config import discover_template_roots, load_config
from .errors import ErrorCodes, ScaffoldCancelled, ScaffoldError
from .materialize import materialize, replace_vars
from .placeholders import build_replacements, find_placeholders, group_placeholders, normalize_key
from .resolver import build_lookup, list_templates, resolve_include, visible_templates

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def choose_template(self, names: Sequence[str]) -> Optional[str]:
        """Return the chosen template name, or None to cancel."""
        ...

    def ask_value(self, key: str, default: str) -> Optional[str]:
        """Return the raw value for a logical variable, or None to cancel."""
        ...


class ConsolePrompter:
    """Prompts on stdin/stdout. EOF and Ctrl-C cancel."""

    def __init__(self, input_func=None, output: Optional[TextIO] = None) -> None:
        self._input = input_func if input_func is not None else input
        self._output = output if output is not None else sys.stdout

    def _ask(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            self._output.write("\n")
            return None

    def choose_template(self, names: Sequence[str]) -> Optional[str]:
        for i, name in enumerate(names, start=1):
            self._output.write(f"  {i}) {name}\n")
        while True:
            answer = self._ask(f"Select a template to copy [1-{len(names)}]: ")
            if answer is None:
                return None
            answer = answer.strip()
            if answer in names:
                return answer
            if answer.isdigit() and 1 <= int(answer) <= len(names):
                return names[int(answer) - 1]
            self._output.write(f"Unknown template: {answer!r}\n")

    def ask_value(self, key: str, default: str) -> Optional[str]:
        answer = self._ask(f"Enter value for {key} [{default}]: ")
        if answer is None:
            return None
        return answer if answer else default


@dataclass
class ScaffoldResult:
    template: str
    destination: Path
    replacements: Dict[str, str] = field(default_factory=dict)
    files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def parse_params(param_args: Optional[Sequence[str]]) -> Dict[str, str]:
    """
    Parse -p arguments into a mapping of logical variable -> value.

    Accepted forms per item: key=value, key:value, "key value". Keys are
    normalised like placeholder tokens, so "-p Name=x" and "-p NAME_CASE=x"
    both preset the variable "name". A later item overrides an earlier one.
    """
    result: Dict[str, str] = {}
    if not param_args:
        return result

    for raw in param_args:
        if raw is None:
            continue
        s = str(raw).strip()
        if not s:
            continue
        key: Optional[str] = None
        val: Optional[str] = None

        # Allow quotes around the entire token
        if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
            s = s[1:-1]

        for sep in ("=", ":"):
            if sep in s:
                parts = s.split(sep, 1)
                if parts[0].strip():
                    key, val = parts[0].strip(), parts[1].strip()
                    break
        if key is None:
            tokens = s.split(None, 1)
            if len(tokens) == 2:
                key, val = tokens[0], tokens[1].strip()
        if key is None or val is None or not normalize_key(key):
            raise ScaffoldError(ErrorCodes.INVALID_PARAM, param=raw)

        result[normalize_key(key)] = val

    return result


def _check_destination(destination: Optional[Path]) -> Path:
    if destination is None or not str(destination).strip():
        raise ScaffoldError(ErrorCodes.INVALID_DESTINATION, reason="no destination selected")
    dest = Path(os.path.abspath(destination))
    if dest.exists() and not dest.is_dir():
        raise ScaffoldError(ErrorCodes.INVALID_DESTINATION, path=str(dest), reason="not a directory")
    return dest


def _collect_values(
    groups: Mapping[str, Set[str]],
    values: Dict[str, str],
    presets: Mapping[str, str],
    prompter: Prompter,
    default: str,
) -> None:
    """Fill values for every group key not answered yet. Raises ScaffoldCancelled."""
    for key in sorted(groups):
        if key in values:
            continue
        # Presets (-p) are never prompted
        if key in presets:
            values[key] = presets[key]
            continue
        value = prompter.ask_value(key, default)
        if value is None:
            logger.warning("Template creation cancelled.")
            raise ScaffoldCancelled(stage="value", variable=key)
        values[key] = value


def _unique(names: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for n in names:
        if n not in seen:
            seen.add(n)
            out.append(n)
    return out


def run_scaffold(
    destination: Optional[Path],
    project_root: Optional[Path],
    prompter: Prompter,
    template_name: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    template_paths: Sequence[str] = (),
) -> ScaffoldResult:
    """
    Scaffold one template into destination.

    - template_name skips the picker; hidden templates may be named here.
    - params presets values by logical variable key; those are not prompted.
    - template_paths are searched ahead of configured paths and .templates.

    Raises ScaffoldCancelled when a prompt is dismissed and ScaffoldError for
    every other fatal condition.
    """
    dest = _check_destination(destination)
    if project_root is None or not os.path.isdir(project_root):
        raise ScaffoldError(ErrorCodes.NO_WORKSPACE, path=None if project_root is None else str(project_root))
    root = Path(os.path.abspath(project_root))

    config = load_config(root)
    roots = discover_template_roots(root, list(template_paths) + config.template_paths)
    if not roots:
        raise ScaffoldError(ErrorCodes.NO_TEMPLATE_ROOTS, project_root=str(root))

    templates = list_templates(roots)
    lookup = build_lookup(templates)
    names = _unique([t.name for t in visible_templates(templates)])
    if not names:
        raise ScaffoldError(ErrorCodes.NO_TEMPLATES, roots=[str(r) for r in roots])

    if template_name is None:
        template_name = prompter.choose_template(names)
        if template_name is None:
            logger.warning("Template creation cancelled.")
            raise ScaffoldCancelled(stage="template")
    if template_name not in lookup:
        raise ScaffoldError(ErrorCodes.TEMPLATE_NOT_FOUND, name=template_name)
    template_dir = lookup[template_name]

    warnings: List[str] = []
    visited: Set[str] = set()
    pending: List[str] = []
    tokens = find_placeholders(template_dir, roots, lookup, config.ignore, visited, pending)

    presets = {normalize_key(k): v for k, v in (params or {}).items()}
    values: Dict[str, str] = {}
    _collect_values(group_placeholders(tokens), values, presets, prompter, dest.name)

    # Includes built from placeholders: render with the values known so far,
    # scan what they reach, and ask for any new variable before writing
    while pending:
        replacements = build_replacements(group_placeholders(tokens), values)
        references, pending = pending, []
        for reference in references:
            target = resolve_include(replace_vars(reference, replacements), roots, lookup)
            if target is not None:
                tokens |= find_placeholders(target, roots, lookup, config.ignore, visited, pending)
        _collect_values(group_placeholders(tokens), values, presets, prompter, dest.name)

    if not tokens:
        logger.warning("No template variables found.")
        warnings.append("No template variables found.")

    replacements = build_replacements(group_placeholders(tokens), values)
    report = materialize(template_dir, dest, replacements, roots, lookup)

    logger.info("Template '%s' copied to %s", template_name, dest)
    return ScaffoldResult(
        template=template_name,
        destination=dest,
        replacements=replacements,
        files=report.files,
        warnings=warnings + report.warnings,
    )
