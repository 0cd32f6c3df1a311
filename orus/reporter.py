"""Compiler error reporting: builds and emits diagnostics for common mistakes."""

from __future__ import annotations

from typing import Optional, TextIO

from orus.diagnostics import (
    Diagnostic,
    ErrorCode,
    SourceSpan,
    closest_name,
    emit_diagnostic,
)
from orus.symbols import SymbolTable, Token

_NAME_LIMIT = 63


def _clip(text: str, size: int) -> str:
    """Limit ``text`` to what fits a buffer of ``size`` bytes including the terminator."""
    return text[: size - 1]


class ErrorReporter:
    """Reports compile errors for one source file.

    After the first error the reporter enters panic mode and stays silent
    until ``panic_mode`` is cleared; ``had_error`` records that any error
    was reported. Every reporting method returns the emitted diagnostic, or
    None when it was suppressed.
    """

    def __init__(
        self,
        source: str,
        file_path: Optional[str],
        symbols: Optional[SymbolTable] = None,
        stream: Optional[TextIO] = None,
        current_line: int = 0,
    ) -> None:
        self.source = source
        self.file_path = file_path
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.stream = stream
        self.current_line = current_line
        self.panic_mode = False
        self.had_error = False

    # -- helpers -----------------------------------------------------------

    def _begin(self) -> bool:
        if self.panic_mode:
            return False
        self.panic_mode = True
        return True

    def _span(self, token: Token, length: Optional[int] = None) -> SourceSpan:
        return SourceSpan(
            file_path=self.file_path,
            line=token.line,
            column=token.column(self.source),
            length=token.length if length is None else length,
        )

    def _suggest(self, name: str) -> Optional[str]:
        return closest_name(name, (s.name for s in self.symbols.active_symbols()))

    def _emit(self, diagnostic: Diagnostic) -> Diagnostic:
        emit_diagnostic(diagnostic, self.stream)
        self.had_error = True
        return diagnostic

    def _simple(
        self,
        token: Token,
        code: ErrorCode,
        message: str,
        help_text: Optional[str],
        note: Optional[str],
    ) -> Optional[Diagnostic]:
        if not self._begin():
            return None
        return self._emit(
            Diagnostic(
                code=code,
                message=message,
                primary_span=self._span(token),
                help=help_text,
                notes=[note] if note else [],
            )
        )

    # -- reports -----------------------------------------------------------

    def undefined_variable(
        self, use_token: Token, def_token: Optional[Token], name: str
    ) -> Optional[Diagnostic]:
        """Report a variable that cannot be resolved, pointing at its definition if known."""
        if not self._begin():
            return None
        secondary = []
        if def_token is not None:
            secondary.append(self._span(def_token))
            if def_token.line < use_token.line:
                help_text = (
                    f"variable `{name}` was defined on line {def_token.line} "
                    "but is no longer in scope"
                )
                note = (
                    "consider moving the variable declaration to an outer scope "
                    "if you need to use it here"
                )
            else:
                help_text = (
                    f"variable `{name}` is defined on line {def_token.line} "
                    "but used before its declaration"
                )
                note = "in Orus, variables must be declared before they are used"
        else:
            help_text = (
                f"could not find a declaration of `{name}` in this scope or any parent scope"
            )
            note = "check for typos or declare the variable before using it"

        notes = [note]
        suggestion = self._suggest(name)
        if suggestion and suggestion != name:
            notes.append(_clip(f"did you mean `{suggestion}`?", 64))

        return self._emit(
            Diagnostic(
                code=ErrorCode.UNDEFINED_VARIABLE,
                message=_clip(f"cannot find variable `{name}` in this scope", 128),
                primary_span=self._span(use_token),
                secondary_spans=secondary,
                help=_clip(help_text, 256),
                notes=notes,
            )
        )

    def type_mismatch(self, token: Token, expected: str, actual: str) -> Optional[Diagnostic]:
        """Report a value whose type differs from the one expected."""
        if not self._begin():
            return None
        note: Optional[str] = None
        if "i32" in expected and "f64" in actual:
            help_text = "try using an explicit cast to convert the float to an integer"
            note = "floating-point to integer conversions may lose precision"
        elif "f64" in expected and ("i32" in actual or "u32" in actual):
            help_text = "try using an explicit cast to convert the integer to a float"
        elif "bool" in expected:
            help_text = (
                "Orus requires explicit boolean conditions - try a comparison like "
                "`!= 0` or `== true`"
            )
        elif "bool" in actual:
            help_text = (
                "booleans cannot be implicitly converted - use an if statement or "
                "conditional instead"
            )
        elif "array" in expected or "array" in actual:
            help_text = "arrays must have matching element types and dimensions"
            note = "consider creating a new array with the correct type"
        elif "string" in expected or "string" in actual:
            help_text = "strings cannot be implicitly converted to or from other types"
            note = "use string interpolation for formatting values as strings"
        else:
            help_text = (
                "try using a compatible type or adding an explicit conversion with "
                f"`as {expected}`"
            )
        return self._emit(
            Diagnostic(
                code=ErrorCode.TYPE_MISMATCH,
                message=_clip(f"expected type `{expected}`, found `{actual}`", 128),
                primary_span=self._span(token),
                help=_clip(help_text, 256),
                notes=[note] if note else [],
            )
        )

    def redeclaration(self, token: Token, name: str) -> Optional[Diagnostic]:
        """Report a name declared twice in one scope."""
        if not self._begin():
            return None
        if len(name) < 120:
            help_text = _clip(
                f"consider using a different name like `{name}2` or shadowing it in a "
                "new scope block",
                256,
            )
            notes = ["in Orus, each variable must have a unique name within its scope"]
        else:
            help_text = "rename the variable or remove the previous declaration"
            notes = []
        return self._emit(
            Diagnostic(
                code=ErrorCode.SCOPE_ERROR,
                message=_clip(f"variable `{name}` already declared in this scope", 128),
                primary_span=self._span(token),
                help=help_text,
                notes=notes,
            )
        )

    def generic_type_error(
        self,
        token: Token,
        message: str,
        help: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Optional[Diagnostic]:
        """Report a type error with a caller-supplied message, help and note."""
        return self._simple(token, ErrorCode.TYPE_MISMATCH, message, help, note)

    def undefined_function(self, token: Token) -> Optional[Diagnostic]:
        """Report a call of a function that cannot be found."""
        if not self._begin():
            return None
        notes = [
            "functions must be defined before use and imported if from another module"
        ]
        name = token.lexeme[:_NAME_LIMIT]
        suggestion = self._suggest(name)
        if suggestion and suggestion[:_NAME_LIMIT] != name:
            notes.append(_clip(f"did you mean `{suggestion}`?", 64))
        return self._emit(
            Diagnostic(
                code=ErrorCode.FUNCTION_CALL,
                message=_clip(f"cannot find function `{token.lexeme}` in this scope", 128),
                primary_span=self._span(token),
                help="check for typos, missing imports, or incorrect function name",
                notes=notes,
            )
        )

    def private_function(self, token: Token) -> Optional[Diagnostic]:
        """Report use of a function that is not exported by its module."""
        return self._simple(
            token,
            ErrorCode.PRIVATE_ACCESS,
            _clip(f"function `{token.lexeme}` is private", 128),
            "mark the function with `pub` to allow access from other modules",
            "only public items can be accessed from other modules",
        )

    def private_variable(self, token: Token) -> Optional[Diagnostic]:
        """Report use of a variable that is not exported by its module."""
        return self._simple(
            token,
            ErrorCode.PRIVATE_ACCESS,
            _clip(f"variable `{token.lexeme}` is private", 128),
            "mark the variable with `pub` to allow access from other modules",
            "only public items can be accessed from other modules",
        )

    def immutable_assignment(self, token: Token, name: str) -> Optional[Diagnostic]:
        """Report an assignment to a variable not declared mutable."""
        return self._simple(
            token,
            ErrorCode.IMMUTABLE_ASSIGNMENT,
            _clip(f"cannot assign to immutable variable `{name}`", 128),
            "use `let mut` to declare the variable as mutable",
            "variables are immutable by default",
        )

    def struct_field_type_mismatch(
        self,
        token: Token,
        struct_name: str,
        field_name: str,
        expected: str,
        actual: str,
    ) -> Optional[Diagnostic]:
        """Report a struct field given a value of the wrong type."""
        return self._simple(
            token,
            ErrorCode.TYPE_MISMATCH,
            _clip(
                f"type mismatch for field `{field_name}` in struct `{struct_name}`: "
                f"expected `{expected}`, found `{actual}`",
                256,
            ),
            "check the struct definition and the value assigned to this field",
            "all struct fields must match their declared types",
        )

    def field_access_non_struct(self, token: Token, actual: str) -> Optional[Diagnostic]:
        """Report field access on a value that is not a struct."""
        return self._simple(
            token,
            ErrorCode.TYPE_MISMATCH,
            _clip(f"can only access fields on structs, but found `{actual}`", 128),
            "make sure you are accessing a struct instance",
            "field access is only valid on struct types",
        )

    def is_type_second_arg(self, token: Token, actual: str) -> Optional[Diagnostic]:
        """Report a non-string second argument to ``is_type()``."""
        return self._simple(
            token,
            ErrorCode.TYPE_MISMATCH,
            _clip(
                f"second argument to `is_type()` must be a string, found `{actual}`", 128
            ),
            'provide a string literal representing a type name, e.g., "i32", "string", etc.',
            "is_type() checks if a value has the specified type, where the type name "
            "must be a string",
        )

    def len_invalid_type(self, token: Token, actual: str) -> Optional[Diagnostic]:
        """Report ``len()`` applied to something that is neither array nor string."""
        return self._simple(
            token,
            ErrorCode.TYPE_MISMATCH,
            _clip(f"`len()` expects an array or string, found `{actual}`", 128),
            "provide an array or string as the argument to len()",
            "the len() function can only be used with arrays or strings to determine "
            "their length",
        )

    def builtin_arg_count(
        self, token: Token, name: str, expected: int, actual: int
    ) -> Optional[Diagnostic]:
        """Report a built-in function called with the wrong number of arguments."""
        if not self._begin():
            return None
        message = _clip(
            f"{name}() expects {expected} argument{'' if expected == 1 else 's'} "
            f"but {actual} {'was' if actual == 1 else 'were'} supplied",
            128,
        )
        note: Optional[str] = None
        if name == "type_of":
            help_text = f"provide a value to check its type: {name}(value)"
            note = "type_of() returns a string representation of the type of the given value"
        elif name == "is_type":
            help_text = f'provide both a value and a type string: {name}(value, "type_name")'
            note = "is_type() checks if a value matches the specified type"
        elif name == "substring":
            help_text = f"provide a string, start index, and length: {name}(str, start, length)"
            note = "substring() extracts a portion of the given string"
        elif name == "len":
            help_text = f"provide an array or string: {name}(value)"
            note = "len() returns the length of an array or string"
        elif name == "push":
            help_text = f"provide an array and a value: {name}(array, value)"
            note = "push() adds an element to the end of an array"
        elif name == "pop":
            help_text = f"provide an array: {name}(array)"
            note = "pop() removes and returns the last element from an array"
        else:
            help_text = (
                f"provide {expected} argument{'' if expected == 1 else 's'} to {name}()"
            )
        return self._emit(
            Diagnostic(
                code=ErrorCode.FUNCTION_CALL,
                message=message,
                primary_span=self._span(token),
                help=_clip(help_text, 128),
                notes=[note] if note else [],
            )
        )

    def simple_error(self, code: ErrorCode, message: str) -> Optional[Diagnostic]:
        """Report an error with no token, at the start of the current line."""
        if not self._begin():
            return None
        span = SourceSpan(
            file_path=self.file_path,
            line=self.current_line if self.current_line > 0 else 1,
            column=1,
            length=1,
        )
        return self._emit(
            Diagnostic(
                code=code,
                message=message,
                primary_span=span,
                help="refer to the Orus documentation for possible resolutions",
                notes=["a generic compiler error occurred"],
            )
        )

    def token_error(self, token: Token, code: ErrorCode, message: str) -> Optional[Diagnostic]:
        """Report an error with the caret on ``token``."""
        if not self._begin():
            return None
        return self._emit(
            Diagnostic(
                code=code,
                message=message,
                primary_span=self._span(token, max(token.length, 1)),
                help="check the highlighted token for mistakes",
                notes=["the compiler encountered an unexpected token here"],
            )
        )