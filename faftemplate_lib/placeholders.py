"""
Placeholder discovery, grouping and variant detection.

A placeholder is any "__inner__" token whose inner text is made of letters,
digits, '_' and '-'. Tokens that differ only in case, separators or a trailing
case marker ("__name__", "__Name__", "__NAME_CASE__") share one logical
variable. The spelling of each token decides which variant of the value it
receives.
"""
import logging
import os
import re
from pathlib import Path
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .cases import build_variants
from .resolver import resolve_include

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"__([A-Za-z0-9_-]+)__")
INCLUDE_PREFIX = "__INCLUDE__"
INCLUDE_PATTERN = re.compile(r"^__INCLUDE__\((.+)\)$")
CASE_MARKER_PATTERN = re.compile(r"(?:[_-][Cc][Aa][Ss][Ee]|(?<=[a-z0-9])Case|(?<=[A-Za-z0-9])CASE)$")

_UPPER = re.compile(r"[A-Z0-9]+")
_LOWER = re.compile(r"[a-z0-9]+")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def include_reference(name: str) -> Optional[str]:
    """Return the reference of an include directive name, or None."""
    m = INCLUDE_PATTERN.match(name)
    return m.group(1) if m else None


def find_placeholders_in_string(s: str, ignore: Collection[str] = ()) -> Set[str]:
    found: Set[str] = set()
    for m in PLACEHOLDER_PATTERN.finditer(s or ""):
        token = m.group(0)
        # "__INCLUDE__" is a directive, never a variable
        if token.startswith(INCLUDE_PREFIX) or token in ignore:
            continue
        found.add(token)
    return found


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "rb") as f:
            return f.read().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping content of %s: %s", path, e)
        return None


def _scan_directory(
    directory: str,
    found: Set[str],
    visited: Set[str],
    pending: Optional[List[str]],
    roots: Sequence[Path],
    lookup: Optional[Mapping[str, Path]],
    ignore: Collection[str],
) -> None:
    # Each directory once, keyed by real path: include cycles and symlink loops stop here
    key = os.path.realpath(directory)
    if key in visited:
        logger.debug("Already scanned %s", directory)
        return
    visited.add(key)

    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        logger.debug("Cannot list %s: %s", directory, e)
        return

    for entry in entries:
        # Names are always scanned, include directives too (their reference may hold tokens)
        found.update(find_placeholders_in_string(entry.name, ignore))

        reference = include_reference(entry.name) if entry.is_dir() else None
        if reference is not None:
            # A reference built from placeholders can only resolve once values are known
            if pending is not None and PLACEHOLDER_PATTERN.search(reference):
                pending.append(reference)
                continue
            target = resolve_include(reference, roots, lookup)
            if target is None:
                logger.debug("Include %r not resolvable during scan", reference)
                if pending is not None:
                    pending.append(reference)
            else:
                _scan_directory(str(target), found, visited, pending, roots, lookup, ignore)
            # The include directory's own children are never copied, so never scanned
            continue

        if entry.is_dir():
            _scan_directory(entry.path, found, visited, pending, roots, lookup, ignore)
        else:
            text = _read_text(entry.path)
            # Binary or unreadable: name only
            if text is not None:
                found.update(find_placeholders_in_string(text, ignore))


def find_placeholders(
    template_dir: Path,
    roots: Sequence[Path] = (),
    lookup: Optional[Mapping[str, Path]] = None,
    ignore: Collection[str] = (),
    visited: Optional[Set[str]] = None,
    pending: Optional[List[str]] = None,
) -> Set[str]:
    """
    Collect every distinct placeholder token under a template directory.

    Names and text contents are scanned. Include directives are followed when
    their reference resolves as written; each directory is scanned at most
    once (by real path), so include cycles terminate.

    Pass visited to share the scanned set across calls. When pending is given,
    include references that contain placeholders or do not resolve yet are
    appended to it instead of being followed, so the caller can render them
    with known values and scan their targets later.
    """
    found: Set[str] = set()
    if not os.path.isdir(template_dir):
        return found
    if visited is None:
        visited = set()
    _scan_directory(str(template_dir), found, visited, pending, roots, lookup, frozenset(ignore))
    return found


def inner_text(token: str) -> str:
    if token.startswith("__") and token.endswith("__") and len(token) >= 4:
        return token[2:-2]
    return token


def strip_case_marker(inner: str) -> str:
    """
    Remove a trailing case marker ("_CASE", "-case", "Case", "CASE").

    "Case" counts after a lowercase letter or digit ("NameCase"), "CASE"
    after any letter or digit ("NAMECASE", "nameCASE"). A lowercase "case"
    with no separator is part of the word ("showcase"). The marker is kept
    when nothing alphanumeric would remain.
    """
    stripped = CASE_MARKER_PATTERN.sub("", inner)
    # "__CASE__" or "___case__": the marker is the whole name
    if _NON_ALNUM.sub("", stripped):
        return stripped
    return inner


def normalize_key(token: str) -> str:
    """
    Canonical logical-variable key of a token.

    >>> normalize_key("__NAME_CASE__")
    'name'
    """
    inner = strip_case_marker(inner_text(token))
    return _NON_ALNUM.sub("", inner).lower()


def group_placeholders(tokens: Iterable[str]) -> Dict[str, Set[str]]:
    groups: Dict[str, Set[str]] = {}
    for token in tokens:
        groups.setdefault(normalize_key(token), set()).add(token)
    return groups


def detect_variant(inner: str) -> str:
    """
    Classify the naming style of a placeholder's inner text.

    Rules in priority order: '-' -> kebab, '_' -> snake, only uppercase
    letters/digits -> upper, only lowercase letters/digits -> lower, first
    character lowercase -> camel, anything else -> pascal.
    """
    if "-" in inner:
        return "kebab"
    if "_" in inner:
        return "snake"
    if _UPPER.fullmatch(inner):
        return "upper"
    if _LOWER.fullmatch(inner):
        return "lower"
    if inner[:1].islower():
        return "camel"
    return "pascal"


def token_variant(token: str) -> str:
    return detect_variant(strip_case_marker(inner_text(token)))


def build_replacements(
    groups: Mapping[str, Collection[str]],
    values: Mapping[str, str],
) -> Dict[str, str]:
    """
    Build the token -> replacement map from one raw value per logical variable.

    Groups without a value get an empty value.
    """
    replacements: Dict[str, str] = {}
    for key, tokens in groups.items():
        variants = build_variants(values.get(key, ""))
        for token in tokens:
            variant = token_variant(token)
            # Unknown style falls back to the flat rendering
            replacements[token] = variants.get(variant, variants["lower"])
    return replacements
