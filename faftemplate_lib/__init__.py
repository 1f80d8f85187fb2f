"""
faftemplate_lib: scaffold source trees from template directories with __placeholder__ tokens.

Public API:
- build_variants(value: str) -> dict[str, str]
- find_placeholders(template_dir, roots=(), lookup=None, ignore=()) -> set[str]
- group_placeholders(tokens) -> dict[str, set[str]]
- detect_variant(inner: str) -> str
- build_replacements(groups, values) -> dict[str, str]
- resolve_include(reference, roots, lookup=None) -> Path | None
- materialize(source, destination, replacements, roots=(), lookup=None) -> CopyReport
- run_scaffold(destination, project_root, prompter, ...) -> ScaffoldResult

The engine supports:
- Placeholders in directory names, file names and UTF-8 file contents.
- One value per logical variable, rendered per site as lower, UPPER, Pascal,
  camel, snake_case or kebab-case depending on how the placeholder is spelled.
- "__INCLUDE__(reference)" directories that splice another template fragment
  into the current directory, with cycle protection.
- Template roots from .faftemplate.yaml plus the project's .templates folder;
  templates named "(like-this)" are include-only.
"""
from .cases import VARIANT_KEYS, build_variants, split_words
from .config import discover_template_roots, load_config
from .errors import ErrorCodes, ScaffoldCancelled, ScaffoldError
from .materialize import CopyReport, materialize, replace_vars
from .placeholders import (
    build_replacements,
    detect_variant,
    find_placeholders,
    group_placeholders,
    normalize_key,
)
from .resolver import TemplateDefinition, build_lookup, list_templates, resolve_include, visible_templates
from .scaffold import ConsolePrompter, Prompter, ScaffoldResult, parse_params, run_scaffold

__all__ = [
    "VARIANT_KEYS",
    "build_variants",
    "split_words",
    "discover_template_roots",
    "load_config",
    "ErrorCodes",
    "ScaffoldCancelled",
    "ScaffoldError",
    "CopyReport",
    "materialize",
    "replace_vars",
    "build_replacements",
    "detect_variant",
    "find_placeholders",
    "group_placeholders",
    "normalize_key",
    "TemplateDefinition",
    "build_lookup",
    "list_templates",
    "resolve_include",
    "visible_templates",
    "ConsolePrompter",
    "Prompter",
    "ScaffoldResult",
    "parse_params",
    "run_scaffold",
]
