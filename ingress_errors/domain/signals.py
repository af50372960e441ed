from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = [
    "CODE_HEADER",
    "FORMAT_HEADER",
    "DEFAULT_CODE",
    "DEFAULT_FORMAT",
    "HeaderResult",
    "RequestSignal",
    "parse_code",
    "parse_format",
    "is_safe_name_part",
    "template_name",
    "derive_signal",
]

# Header carrying the status code whose page should be rendered.
CODE_HEADER = "X-Code"
# Header carrying the media type the client asked for (its Accept value).
FORMAT_HEADER = "X-Format"

DEFAULT_CODE = "404"
DEFAULT_FORMAT = "html"

# RFC 7230 tchar / quoted-string, ASCII only.
_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_QUOTED = r'"(?:[\t !#-\[\]-~]|\\[\t -~])*"'
_MEDIA_TYPE_RE = re.compile(
    rf"(?P<type>{_TOKEN})/(?P<subtype>{_TOKEN})"
    rf"(?:[ \t]*;[ \t]*{_TOKEN}=(?:{_TOKEN}|{_QUOTED}))*"
)
_CODE_RE = re.compile(r"\+?[0-9]+")
_DIGITS_RE = re.compile(r"[0-9]+")
_UNSAFE_CHARS = ("/", "\\", "\x00")

T = TypeVar("T")


@dataclass(frozen=True)
class HeaderResult(Generic[T]):
    """Outcome of reading one signaling header.

    `reason` is set only when the header was present but unusable and the
    default was substituted; an absent header is not a fallback.
    """

    value: T
    reason: str | None = None

    @property
    def fell_back(self) -> bool:
        return self.reason is not None


def parse_code(raw: str | None) -> HeaderResult[str]:
    """Parse an X-Code value as a non-negative base-10 integer.

    Accepts ASCII digits with an optional leading "+" and returns the
    canonical digit string (leading zeros dropped). The value is never
    converted to int, so no length or range limit applies.
    """
    if raw is None:
        return HeaderResult(DEFAULT_CODE)
    if not _CODE_RE.fullmatch(raw):
        return HeaderResult(DEFAULT_CODE, f"invalid digit found in {raw!r}")
    return HeaderResult(raw.lstrip("+").lstrip("0") or "0")


def is_safe_name_part(part: str) -> bool:
    """Return True if `part` can be embedded in a file name under the base dir."""
    if part in ("", ".", ".."):
        return False
    return not any(ch in part for ch in _UNSAFE_CHARS)


def parse_format(raw: str | None) -> HeaderResult[str]:
    """Extract the lower-cased subtype from an X-Format media type.

    A structured-syntax suffix is not part of the subtype:
    "application/problem+json" yields "problem".
    """
    if raw is None:
        return HeaderResult(DEFAULT_FORMAT)
    m = _MEDIA_TYPE_RE.fullmatch(raw)
    if m is None:
        return HeaderResult(DEFAULT_FORMAT, f"invalid media type {raw!r}")
    subtype, _, _suffix = m.group("subtype").lower().partition("+")
    if not subtype:
        return HeaderResult(DEFAULT_FORMAT, f"invalid media type {raw!r}")
    if not is_safe_name_part(subtype):
        return HeaderResult(DEFAULT_FORMAT, f"unsafe subtype {subtype!r}")
    return HeaderResult(subtype)


def template_name(code: str, subtype: str) -> str:
    """Build the "{code}.{subtype}" template file name.

    Raises:
        ValueError: if code is not ASCII digits or subtype could escape the base dir.
    """
    if not _DIGITS_RE.fullmatch(code):
        raise ValueError(f"code must be ASCII digits: {code!r}")
    if not is_safe_name_part(subtype):
        raise ValueError(f"unsafe subtype: {subtype!r}")
    return f"{code}.{subtype}"


@dataclass(frozen=True)
class RequestSignal:
    """Code and subtype derived from one request's headers."""

    code: HeaderResult[str]
    subtype: HeaderResult[str]

    @property
    def filename(self) -> str:
        return template_name(self.code.value, self.subtype.value)


def derive_signal(code_header: str | None, format_header: str | None) -> RequestSignal:
    """Map raw X-Code / X-Format values to a RequestSignal. Performs no I/O."""
    return RequestSignal(code=parse_code(code_header), subtype=parse_format(format_header))
