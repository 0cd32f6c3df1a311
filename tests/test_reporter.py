import io

import pytest

from orus.diagnostics import ErrorCode
from orus.reporter import ErrorReporter
from orus.symbols import SymbolTable, Token

SOURCE = "let count = 1\nprint(cout)\n"


def make(symbols=None, file_path="<memory>", source=SOURCE, current_line=0):
    stream = io.StringIO()
    reporter = ErrorReporter(source, file_path, symbols, stream, current_line)
    return reporter, stream


def use_token():
    return Token("cout", line=2, offset=SOURCE.index("cout"))


def test_undefined_variable_without_definition():
    reporter, stream = make()
    diag = reporter.undefined_variable(use_token(), None, "cout")
    assert diag.code == ErrorCode.UNDEFINED_VARIABLE
    assert diag.message == "cannot find variable `cout` in this scope"
    assert diag.notes == ["check for typos or declare the variable before using it"]
    assert diag.primary_span.column == use_token().column(SOURCE)
    assert diag.primary_span.length == 4
    assert reporter.had_error and reporter.panic_mode
    assert "cannot find variable `cout` in this scope" in stream.getvalue()


def test_panic_mode_suppresses_further_reports():
    reporter, stream = make()
    reporter.undefined_variable(use_token(), None, "cout")
    before = stream.getvalue()
    assert reporter.type_mismatch(use_token(), "i32", "f64") is None
    assert stream.getvalue() == before


def test_clearing_panic_mode_allows_reports_again():
    reporter, stream = make()
    reporter.private_function(use_token())
    reporter.panic_mode = False
    diag = reporter.private_variable(use_token())
    assert diag.message == "variable `cout` is private"


def test_undefined_variable_defined_earlier_is_out_of_scope():
    reporter, _ = make()
    definition = Token("cout", line=1, offset=4)
    diag = reporter.undefined_variable(use_token(), definition, "cout")
    assert "no longer in scope" in diag.help
    assert len(diag.secondary_spans) == 1
    assert diag.secondary_spans[0].line == 1


def test_undefined_variable_defined_later_is_used_before_declaration():
    reporter, _ = make()
    definition = Token("cout", line=5, offset=0)
    diag = reporter.undefined_variable(use_token(), definition, "cout")
    assert "used before its declaration" in diag.help
    assert diag.notes[0] == "in Orus, variables must be declared before they are used"


def test_undefined_variable_suggests_close_symbol():
    symbols = SymbolTable()
    symbols.add("count", Token("count", 1, 4))
    reporter, _ = make(symbols)
    diag = reporter.undefined_variable(use_token(), None, "cout")
    assert diag.notes[-1] == "did you mean `count`?"


def test_inactive_symbols_are_not_suggested():
    symbols = SymbolTable()
    symbols.add("count", Token("count", 1, 4), scope=1)
    symbols.remove_scope(1)
    reporter, _ = make(symbols)
    diag = reporter.undefined_variable(use_token(), None, "cout")
    assert len(diag.notes) == 1


@pytest.mark.parametrize(
    "expected, actual, help_start, has_note",
    [
        ("i32", "f64", "try using an explicit cast to convert the float", True),
        ("f64", "i32", "try using an explicit cast to convert the integer", False),
        ("bool", "i32", "Orus requires explicit boolean conditions", False),
        ("i32", "bool", "booleans cannot be implicitly converted", False),
        ("array", "i32", "arrays must have matching element types", True),
        ("string", "i32", "strings cannot be implicitly converted", True),
    ],
)
def test_type_mismatch_help(expected, actual, help_start, has_note):
    reporter, _ = make()
    diag = reporter.type_mismatch(use_token(), expected, actual)
    assert diag.message == f"expected type `{expected}`, found `{actual}`"
    assert diag.help.startswith(help_start)
    assert bool(diag.notes) == has_note


def test_type_mismatch_default_help_names_expected_type():
    reporter, _ = make()
    diag = reporter.type_mismatch(use_token(), "u64", "i64")
    assert diag.help.endswith("`as u64`")


def test_redeclaration_suggests_numbered_name():
    reporter, _ = make()
    diag = reporter.redeclaration(use_token(), "cout")
    assert diag.code == ErrorCode.SCOPE_ERROR
    assert "`cout2`" in diag.help
    assert diag.notes == ["in Orus, each variable must have a unique name within its scope"]


def test_redeclaration_long_name_falls_back():
    reporter, _ = make()
    diag = reporter.redeclaration(use_token(), "x" * 130)
    assert diag.help == "rename the variable or remove the previous declaration"
    assert diag.notes == []


def test_generic_type_error_without_help_or_note():
    reporter, stream = make()
    diag = reporter.generic_type_error(use_token(), "bad thing", None, None)
    assert diag.help is None and diag.notes == []
    assert "help" not in stream.getvalue()


def test_undefined_function_suggestion():
    symbols = SymbolTable()
    symbols.add("count", Token("count", 1, 4))
    reporter, _ = make(symbols)
    diag = reporter.undefined_function(use_token())
    assert diag.code == ErrorCode.FUNCTION_CALL
    assert diag.message == "cannot find function `cout` in this scope"
    assert diag.notes[-1] == "did you mean `count`?"


def test_immutable_assignment():
    reporter, _ = make()
    diag = reporter.immutable_assignment(use_token(), "cout")
    assert diag.code == ErrorCode.IMMUTABLE_ASSIGNMENT
    assert diag.help == "use `let mut` to declare the variable as mutable"


def test_struct_and_builtin_type_errors():
    reporter, _ = make()
    diag = reporter.struct_field_type_mismatch(use_token(), "Point", "x", "i32", "string")
    assert "`x`" in diag.message and "`Point`" in diag.message
    reporter.panic_mode = False
    diag = reporter.field_access_non_struct(use_token(), "i32")
    assert diag.message.endswith("`i32`")
    reporter.panic_mode = False
    diag = reporter.is_type_second_arg(use_token(), "i32")
    assert "is_type()" in diag.message
    reporter.panic_mode = False
    diag = reporter.len_invalid_type(use_token(), "bool")
    assert diag.help == "provide an array or string as the argument to len()"


def test_builtin_arg_count_known_function():
    reporter, _ = make()
    diag = reporter.builtin_arg_count(use_token(), "len", 1, 2)
    assert diag.message == "len() expects 1 argument but 2 were supplied"
    assert diag.notes == ["len() returns the length of an array or string"]


def test_builtin_arg_count_unknown_function():
    reporter, _ = make()
    diag = reporter.builtin_arg_count(use_token(), "foo", 2, 1)
    assert diag.message == "foo() expects 2 arguments but 1 was supplied"
    assert diag.help == "provide 2 arguments to foo()"
    assert diag.notes == []


def test_simple_error_defaults_to_line_one():
    reporter, _ = make()
    diag = reporter.simple_error(ErrorCode.GENERAL, "oops")
    assert diag.primary_span.line == 1
    assert diag.primary_span.column == 1


def test_simple_error_uses_current_line():
    reporter, _ = make(current_line=7)
    diag = reporter.simple_error(ErrorCode.GENERAL, "oops")
    assert diag.primary_span.line == 7


def test_token_error_empty_token_has_length_one():
    reporter, _ = make()
    diag = reporter.token_error(Token("", 1, 0), ErrorCode.PARSE, "unexpected end")
    assert diag.primary_span.length == 1
    assert diag.code == ErrorCode.PARSE


def test_rendered_excerpt_from_file(tmp_path):
    path = tmp_path / "main.orus"
    path.write_text(SOURCE)
    reporter, stream = make(file_path=str(path))
    reporter.undefined_variable(use_token(), None, "cout")
    output = stream.getvalue()
    assert "print(cout)" in output
    assert "^" * 4 in output and "^" * 5 not in output