"""
Errors raised by a scaffolding run.

Failures local to one file or one include are not errors: they are logged and
collected as warnings. ScaffoldError is only for conditions that abort the run.
"""
from typing import Any, Dict


class ScaffoldError(Exception):
    """
    Fatal scaffolding failure.

    Usage:
        raise ScaffoldError(ErrorCodes.TEMPLATE_NOT_FOUND, name="service")
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, **self.context}


class ScaffoldCancelled(ScaffoldError):
    """A prompt was dismissed. Nothing has been written to the destination."""

    def __init__(self, **context: Any) -> None:
        super().__init__(ErrorCodes.CANCELLED, **context)


class ErrorCodes:
    # === Preconditions ===
    INVALID_DESTINATION = "INVALID_DESTINATION"
    NO_WORKSPACE = "NO_WORKSPACE"
    NO_TEMPLATE_ROOTS = "NO_TEMPLATE_ROOTS"
    NO_TEMPLATES = "NO_TEMPLATES"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"

    # === Input ===
    CANCELLED = "CANCELLED"
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_PARAM = "INVALID_PARAM"

    # === Materialization ===
    COPY_FAILED = "COPY_FAILED"
