"""
Copy a template directory to a destination, substituting placeholders.

Directory and file names, and the contents of UTF-8 text files, are rewritten
with the replacement map. Other files are copied byte for byte. A directory
named "__INCLUDE__(reference)" is replaced by the contents of the template
fragment it references, spliced into the current destination directory.
"""
import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Mapping, Optional, Sequence

from .errors import ErrorCodes, ScaffoldError
from .placeholders import include_reference
from .resolver import resolve_include

logger = logging.getLogger(__name__)


@dataclass
class CopyReport:
    files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def compile_replacements(replacements: Mapping[str, str]) -> Optional[re.Pattern[str]]:
    """
    One alternation of every escaped token, longest first.

    Longer tokens win over tokens they contain; ties are ordered lexically so
    the result does not depend on dict order.
    """
    if not replacements:
        return None
    keys = sorted(replacements, key=lambda k: (-len(k), k))
    return re.compile("|".join(re.escape(k) for k in keys))


def replace_vars(s: str, replacements: Mapping[str, str], pattern: Optional[re.Pattern[str]] = None) -> str:
    """
    Replace every token occurrence in s with its mapped value.

    Values are inserted literally and are not scanned again.
    """
    if pattern is None:
        pattern = compile_replacements(replacements)
    if pattern is None or not s:
        return s
    return pattern.sub(lambda m: replacements[m.group(0)], s)


class _CopyContext:
    def __init__(
        self,
        replacements: Mapping[str, str],
        roots: Sequence[Path],
        lookup: Optional[Mapping[str, Path]],
        destination: str,
    ) -> None:
        self.replacements = replacements
        self.root = os.path.realpath(destination)
        self.pattern = compile_replacements(replacements)
        self.roots = roots
        self.lookup = lookup
        self.report = CopyReport()

    def render(self, s: str) -> str:
        return replace_vars(s, self.replacements, self.pattern)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.report.warnings.append(message)


def _ensure_dir(path: str) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=path, reason=str(e)) from e


def _destination_path(dest: str, name: str, src: str, ctx: _CopyContext) -> str:
    """
    Join a rendered name onto dest, refusing anything that leaves the destination.

    Rendered values may contain path separators ("a/b" nests directories),
    but never an absolute path or a ".." component.
    """
    if not name.strip():
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=src, reason="name renders empty")
    parts = re.split(r"[\\/]+", name)
    if os.path.isabs(name) or name.startswith(("/", "\\")) or ".." in parts:
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=src, name=name, reason="name escapes destination")
    path = os.path.join(dest, name)
    # Symlinks already present in the destination can still point elsewhere
    real = os.path.realpath(path)
    if real != ctx.root and not real.startswith(ctx.root.rstrip(os.sep) + os.sep):
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=src, name=name, reason="name escapes destination")
    return path


def _copy_file(src: str, dest: str, ctx: _CopyContext) -> None:
    try:
        with open(src, "rb") as f:
            data = f.read()
        try:
            out = ctx.render(data.decode("utf-8")).encode("utf-8")
        except UnicodeDecodeError:
            # Binary: copied unchanged
            out = data
        parent = os.path.dirname(dest)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(dest, "wb") as f:
            f.write(out)
        shutil.copymode(src, dest)
    except OSError as e:
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=dest, reason=str(e)) from e
    logger.debug("Wrote %s", dest)
    ctx.report.files.append(Path(dest))


def _copy_tree(src: str, dest: str, ctx: _CopyContext, active: FrozenSet[str]) -> None:
    # Only the chain being copied counts: the same fragment may appear twice elsewhere
    real = os.path.realpath(src)
    if real in active:
        ctx.warn(f"Directory loop at '{src}' skipped.")
        return
    active = active | {real}

    _ensure_dir(dest)
    try:
        entries = sorted(os.scandir(src), key=lambda e: e.name)
    except OSError as e:
        raise ScaffoldError(ErrorCodes.COPY_FAILED, path=src, reason=str(e)) from e

    for entry in entries:
        reference = include_reference(entry.name) if entry.is_dir() else None
        if reference is not None:
            # The reference may itself contain placeholders
            resolved_ref = ctx.render(reference)
            target = resolve_include(resolved_ref, ctx.roots, ctx.lookup)
            if target is None:
                ctx.warn(f"Include '{resolved_ref}' not found, skipped.")
            elif os.path.realpath(target) in active:
                ctx.warn(f"Include '{resolved_ref}' forms a cycle, skipped.")
            else:
                # Splice: the fragment lands in dest, no extra directory level
                logger.debug("Splicing include %r from %s into %s", resolved_ref, target, dest)
                _copy_tree(str(target), dest, ctx, active)
            continue

        dest_path = _destination_path(dest, ctx.render(entry.name), entry.path, ctx)
        if entry.is_dir():
            _copy_tree(entry.path, dest_path, ctx, active)
        else:
            _copy_file(entry.path, dest_path, ctx)


def materialize(
    source: Path,
    destination: Path,
    replacements: Mapping[str, str],
    roots: Sequence[Path] = (),
    lookup: Optional[Mapping[str, Path]] = None,
) -> CopyReport:
    """
    Copy source into destination with substitution and include splicing.

    Unresolved or cyclic includes are skipped and reported as warnings.
    Filesystem failures raise ScaffoldError(COPY_FAILED); whatever was
    written before the failure stays in place.
    """
    ctx = _CopyContext(replacements, roots, lookup, str(destination))
    _copy_tree(str(source), str(destination), ctx, frozenset())
    return ctx.report
