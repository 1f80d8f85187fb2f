"""
Template roots, template definitions and include resolution.

A template root is a directory whose immediate subdirectories are template
definitions. Names starting with '.' are ignored entirely. Names wrapped in
parentheses, e.g. "(common)", are hidden from the picker but can still be
included by other templates.
"""
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

HIDDEN_NAME_PATTERN = re.compile(r"^\(.*\)$")
_SEGMENT_SPLIT = re.compile(r"[\\/]+")


class TemplateDefinition(NamedTuple):
    name: str
    path: Path
    hidden: bool


def list_templates(roots: Sequence[Path]) -> List[TemplateDefinition]:
    """
    Enumerate the template definitions of every root, in root order.

    Dot-prefixed directories are skipped. Within a root, entries are sorted by
    name so the picker order is stable.
    """
    found: List[TemplateDefinition] = []
    for root in roots:
        try:
            entries = sorted(os.scandir(root), key=lambda e: e.name)
        except OSError as e:
            logger.debug("Skipping unreadable template root %s: %s", root, e)
            continue
        for entry in entries:
            # Dot directories (.git and friends) are never templates
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            found.append(
                TemplateDefinition(
                    name=entry.name,
                    path=Path(entry.path),
                    hidden=bool(HIDDEN_NAME_PATTERN.match(entry.name)),
                )
            )
    return found


def visible_templates(templates: Sequence[TemplateDefinition]) -> List[TemplateDefinition]:
    return [t for t in templates if not t.hidden]


def build_lookup(templates: Sequence[TemplateDefinition]) -> Dict[str, Path]:
    """Map template name -> path. The first root defining a name wins."""
    lookup: Dict[str, Path] = {}
    for t in templates:
        lookup.setdefault(t.name, t.path)
    return lookup


def _split_reference(reference: str) -> List[str]:
    return [s for s in _SEGMENT_SPLIT.split(reference.strip()) if s and s != "."]


def _subdir_or_base(base: Path, rest: Sequence[str]) -> Path:
    # Missing subpath: fall back to the fragment root
    if rest:
        candidate = base.joinpath(*rest)
        if candidate.is_dir():
            return candidate
        logger.debug("Include subpath %s missing, using %s", candidate, base)
    return base


def resolve_include(
    reference: str,
    roots: Sequence[Path],
    lookup: Optional[Mapping[str, Path]] = None,
) -> Optional[Path]:
    """
    Resolve an include reference to a directory.

    Tried in order:
    1. an absolute path to an existing directory;
    2. the first segment as a known template name, then the remaining
       segments as a subdirectory of it (falling back to the template itself);
    3. per root: the reference as a relative subdirectory, else a root child
       named like the first segment, with the same subdirectory-or-fallback rule;
    4. the hidden template "(first)", so a reference rendered from a plain
       value ("ci") still reaches a hidden fragment ("(ci)").

    Returns None when nothing matches.
    """
    ref = reference.strip()
    if not ref:
        return None

    # 1. Absolute path
    if os.path.isabs(ref) and os.path.isdir(ref):
        return Path(ref)

    segments = _split_reference(ref)
    if not segments:
        return None
    first, rest = segments[0], segments[1:]

    # 2. Known template name, optionally with a subpath
    if lookup and first in lookup:
        return _subdir_or_base(Path(lookup[first]), rest)

    # 3. Relative to each root, then a root child named like the first segment
    for root in roots:
        root = Path(root)
        candidate = root.joinpath(*segments)
        if candidate.is_dir():
            return candidate
        # Hidden "(name)" templates are matched here by their full name
        try:
            children = sorted(os.scandir(root), key=lambda e: e.name)
        except OSError:
            continue
        for entry in children:
            if entry.name == first and entry.is_dir():
                return _subdir_or_base(Path(entry.path), rest)

    # 4. Bare name of a hidden template
    hidden = f"({first})"
    if lookup and hidden in lookup:
        return _subdir_or_base(Path(lookup[hidden]), rest)

    logger.debug("Include %r did not resolve against %d root(s)", reference, len(roots))
    return None
