"""Unhandled faults — logging and the plain-text 500.

Traceback verbosity is chosen once in ``SiteConfig.traceback_style``:

- ``compact`` (default): error summary plus application frames only
- ``full``: the complete Python traceback
- ``minimal``: one line with the innermost location
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

from brochure.http.response import Response, plain_text

if TYPE_CHECKING:
    from brochure.http.request import Request

logger = logging.getLogger("brochure.server")

INTERNAL_ERROR_BODY = "500 Internal Server Error"


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename:
        return False
    if filename.startswith("<"):
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary plus at most five application frames."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []

    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    # No app frames: show the last 3 instead
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None, *, style: str = "compact") -> None:
    """Log an unhandled fault in the configured traceback style."""
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"

    if style == "full":
        logger.error(prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s - %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))


def internal_error_response() -> Response:
    return plain_text(INTERNAL_ERROR_BODY, status=500)
