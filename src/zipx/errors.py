"""Typed errors for zipx.

Single source of truth for error kinds lives here.

Policy:
- Errors are small and boring.
- Every public failure is a ``ZipxError`` subclass carrying a stable ``kind``.
- The underlying library error (zlib, gzip, pydantic, pickle) is chained via ``from``.
- docs/error_kinds.md is generated from this module (scripts/gen_error_kinds_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Error kinds (single source)
# -------------------------

KIND_GENERIC = "generic"
KIND_EMPTY_INPUT = "empty_input"
KIND_BAD_FORMAT = "bad_format"
KIND_ENCODE_FAILURE = "encode_failure"
KIND_DECODE_FAILURE = "decode_failure"
KIND_NOT_IMPLEMENTED = "not_implemented"


@dataclass(frozen=True, slots=True)
class ErrorKindInfo:
    kind: str
    name: str
    description: str


ERROR_KINDS: tuple[ErrorKindInfo, ...] = (
    ErrorKindInfo(KIND_GENERIC, "ZipxError", "Base class, never raised directly"),
    ErrorKindInfo(KIND_EMPTY_INPUT, "EmptyInput", "Decode called with empty bytes or empty string"),
    ErrorKindInfo(
        KIND_BAD_FORMAT, "BadFormat", "Compressed input is empty, truncated or not a valid stream"
    ),
    ErrorKindInfo(
        KIND_ENCODE_FAILURE, "EncodeFailure", "The encoder (JSON or Gob) rejected the value"
    ),
    ErrorKindInfo(
        KIND_DECODE_FAILURE, "DecodeFailure", "Decoding failed with every encoder that was tried"
    ),
    ErrorKindInfo(
        KIND_NOT_IMPLEMENTED,
        "CodecNotImplemented",
        "A reserved encoder (msgpack, protobuf) or codec (zstd) was selected",
    ),
)

_KIND_BY_NAME: dict[str, ErrorKindInfo] = {e.name: e for e in ERROR_KINDS}


def error_kind_info(name: str) -> ErrorKindInfo | None:
    return _KIND_BY_NAME.get(name)


def render_error_kinds_markdown() -> str:
    """Render docs/error_kinds.md content."""
    lines: list[str] = []
    lines.append("# Error kinds\n")
    lines.append("> GENERATED FILE: do not edit manually.\n")
    lines.append("> Source of truth: `src/zipx/errors.py` (ERROR_KINDS).\n")
    lines.append("> Regenerate: `python scripts/gen_error_kinds_md.py`.\n\n")
    lines.append("Every public failure raised by zipx is one of these exceptions.\n\n")
    lines.append("| Kind | Exception | Meaning |\n")
    lines.append("|---|---|---|\n")
    for e in ERROR_KINDS:
        lines.append(f"| `{e.kind}` | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- All exceptions extend `ZipxError`; match on the class or on `.kind`.\n")
    lines.append("- `CodecNotImplemented` is also a `NotImplementedError`.\n")
    lines.append(
        "- `decode_from_string` falls back to the raw string when Base64 decoding fails; "
        "this is not an error.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class ZipxError(Exception):
    """Base error for zipx."""

    kind: str = KIND_GENERIC


class EmptyInput(ZipxError):
    kind = KIND_EMPTY_INPUT


class BadFormat(ZipxError):
    kind = KIND_BAD_FORMAT


class EncodeFailure(ZipxError):
    kind = KIND_ENCODE_FAILURE


class DecodeFailure(ZipxError):
    kind = KIND_DECODE_FAILURE


class CodecNotImplemented(ZipxError, NotImplementedError):
    kind = KIND_NOT_IMPLEMENTED
