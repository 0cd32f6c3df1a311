"""Runtime error help and project manifest handling."""

from __future__ import annotations

from typing import Iterable, Optional

from orus.diagnostics import Diagnostic, ErrorCode, SourceSpan, closest_name

_MODULE_NAME_LIMIT = 64
_NOTE_LIMIT = 128

_DEFAULT_HELP = "refer to the runtime error message for more details"
_DEFAULT_NOTE = "a runtime error occurred"
_MODULE_BASE_NOTE = (
    "imports are resolved relative to the current file or the standard library path"
)


def _quoted_module(message: str) -> Optional[str]:
    """Return the text between the first pair of backticks, if short enough."""
    start = message.find("`")
    if start < 0:
        return None
    end = message.find("`", start + 1)
    if end < 0:
        return None
    name = message[start + 1 : end]
    if len(name) >= _MODULE_NAME_LIMIT:
        return None
    return name


def _module_not_found_note(message: str, loaded_modules: Iterable[Optional[str]]) -> str:
    name = _quoted_module(message)
    suggestion = None
    if name is not None:
        suggestion = closest_name(name, (m for m in loaded_modules if m))
    if suggestion is None:
        return _MODULE_BASE_NOTE
    note = f"{_MODULE_BASE_NOTE}. Did you mean `{suggestion}`?"
    return note[: _NOTE_LIMIT - 1]


def runtime_help(
    message: str, loaded_modules: Iterable[Optional[str]] = ()
) -> tuple[str, str]:
    """Return a ``(help, note)`` pair explaining a runtime error message."""
    if "string interpolation" in message:
        return (
            "ensure the number of '{}' placeholders matches the number of arguments",
            "each '{}' in the format string corresponds to one argument provided "
            "after the format string",
        )
    if "Stack underflow" in message:
        return (
            "check that every operator has enough input values",
            "this usually means a value was not pushed before the operation",
        )
    if "Operand must" in message or "Operands must" in message:
        return (
            "verify the value types or use explicit casts",
            "the operation expected a different type",
        )
    if "Module" in message and "not found" in message:
        return (
            "check the module path or adjust the ORUS_STD_PATH environment variable",
            _module_not_found_note(message, loaded_modules),
        )
    if "Import cycle" in message:
        return (
            "restructure your modules to remove circular dependencies",
            "module A importing B while B imports A causes an import cycle",
        )
    if "already executed" in message:
        return (
            "import each module only once or use 'use' for reexports",
            "module code runs only on its first import",
        )
    return _DEFAULT_HELP, _DEFAULT_NOTE


def runtime_diagnostic(
    message: str,
    code: int = ErrorCode.RUNTIME,
    file: Optional[str] = None,
    line: int = 0,
    column: int = 0,
    loaded_modules: Iterable[Optional[str]] = (),
) -> Diagnostic:
    """Build the diagnostic shown for a runtime error."""
    help_text, note = runtime_help(message, loaded_modules)
    return Diagnostic(
        code=code,
        message=message,
        primary_span=SourceSpan(
            file_path=file if file else "<runtime>",
            line=line,
            column=column,
            length=1,
        ),
        help=help_text,
        notes=[note],
    )


def manifest_entry(text: Optional[str]) -> Optional[str]:
    """Extract the ``entry`` value from a project manifest's text, or None."""
    if not text:
        return None
    key = text.find('"entry"')
    if key < 0:
        return None
    colon = text.find(":", key)
    if colon < 0:
        return None
    pos = colon + 1
    while pos < len(text) and text[pos] in ' \t"':
        pos += 1
    end = pos
    while end < len(text) and text[end] not in '"\n':
        end += 1
    value = text[pos:end]
    return value or None