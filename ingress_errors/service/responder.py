from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..domain.signals import RequestSignal, derive_signal, is_safe_name_part
from ..logging_conf import get_logger

__all__ = [
    "Outcome",
    "NOT_FOUND",
    "candidate_path",
    "read_template",
    "respond",
]

logger = get_logger("service.responder")


@dataclass(frozen=True)
class Outcome:
    """Status and body to send back for one request."""

    status_code: int
    body: bytes = b""


NOT_FOUND = Outcome(404)


def candidate_path(templates_dir: Path, filename: str) -> Path | None:
    """Join `filename` onto `templates_dir`, or None if it would leave it.

    Only plain names directly under the base directory are allowed.
    """
    if not is_safe_name_part(filename):
        return None
    path = templates_dir / filename
    if path.parent != templates_dir:
        return None
    return path


def read_template(templates_dir: Path, filename: str) -> Outcome:
    """Read `filename` from the base directory into a 200 outcome, else 404."""
    path = candidate_path(templates_dir, filename)
    if path is None:
        logger.warning(
            "template.outside_base",
            extra={"event": "template_outside_base", "template": filename},
        )
        return NOT_FOUND
    try:
        with path.open("rb") as fh:
            body = fh.read()
    except OSError as e:
        logger.warning(
            "template.read_error",
            extra={"event": "template_read_error", "path": str(path), "error": str(e)},
        )
        return NOT_FOUND
    return Outcome(200, body)


def _log_fallbacks(signal: RequestSignal) -> None:
    if signal.code.fell_back:
        logger.warning(
            "signal.code_invalid",
            extra={
                "event": "code_invalid",
                "reason": signal.code.reason,
                "using": signal.code.value,
            },
        )
    if signal.subtype.fell_back:
        logger.warning(
            "signal.format_invalid",
            extra={
                "event": "format_invalid",
                "reason": signal.subtype.reason,
                "using": signal.subtype.value,
            },
        )


def respond(
    *,
    templates_dir: Path,
    path: str,
    code_header: str | None,
    format_header: str | None,
) -> Outcome:
    """Resolve one request against the template directory.

    Only the root path is served. The X-Code value picks the file; a
    successful read always answers 200.
    """
    if path != "/":
        logger.info("request.path_not_root", extra={"event": "path_not_root", "path": path})
        return NOT_FOUND

    signal = derive_signal(code_header, format_header)
    _log_fallbacks(signal)
    return read_template(templates_dir, signal.filename)
