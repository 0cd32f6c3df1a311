# orus

Building blocks for a compiler front-end for the Orus language, written as a
plain Python library with no third-party dependencies.

## What is inside

- `orus.typesys`: the type model (`TypeKind`, `Type`, `ArrayType`,
  `FunctionType`, `StructType`, `EnumType`, `GenericType`, `FieldInfo`,
  `VariantInfo`). It also has a `TypeRegistry` that owns the primitive types
  and the named struct and enum types. The registry's methods are
  `primitive`, `create_struct`, `create_enum`, `find_struct`, `find_enum`,
  `instantiate_struct` and `reset`. It raises `TypeRegistryFullError` after
  256 structs or 256 enums. Free functions: `types_equal`,
  `can_implicitly_convert`, `substitute_generics` and `type_name`.
- `orus.symbols`: `Token`, `Symbol` and a scoped `SymbolTable`, with `add`,
  `find`, `find_any`, `remove_scope` and `active_symbols`. A symbol declared
  twice in the same scope while still active raises `SymbolRedeclaredError`.
- `orus.diagnostics`: `Diagnostic`, `SourceSpan` and `ErrorCode`.
  - `render_diagnostic` and `emit_diagnostic` produce colour-coded error
    reports with source excerpts. `emit_diagnostic` writes to standard output
    unless you pass a stream.
  - `levenshtein_distance` and `closest_name` provide "did you mean" hints.
- `orus.reporter`: `ErrorReporter` builds the standard compiler diagnostics:
  undefined variables and functions, type mismatches, redeclarations, private
  access, immutable assignment, builtin argument counts and more.
  - After the first error it enters panic mode and suppresses further reports
    until `panic_mode` is cleared.
  - `had_error` records whether anything was reported.
- `orus.runtime`: helpers for runtime errors.
  - `runtime_help` returns a `(help, note)` pair for an error message.
  - `runtime_diagnostic` builds the full `Diagnostic`.
  - `manifest_entry` reads the `entry` field from the text of a project
    manifest.

## Installing

```
pip install .
```

## Example

```python
from orus.typesys import TypeRegistry, TypeKind, ArrayType, types_equal

registry = TypeRegistry()
i32 = registry.primitive(TypeKind.I32)
assert types_equal(ArrayType(element=i32), ArrayType(element=registry.primitive(TypeKind.I32)))
```

```python
from orus.diagnostics import closest_name

closest_name("countr", ["counter", "total"])   # "counter"
```

```python
import io
from orus.reporter import ErrorReporter
from orus.symbols import Token

out = io.StringIO()
reporter = ErrorReporter("let x = y\n", "main.orus", stream=out)
reporter.undefined_variable(Token("y", line=1, offset=8), None, "y")
print(out.getvalue())
```

## What this package does not do

This package has no lexer, parser, syntax tree, bytecode compiler or virtual
machine. It cannot run Orus programs, and it has no command-line tool or
interactive prompt. It provides the type model, the symbol table and the error
reporting that such pieces would use.

## Running the tests

```
pip install .[test]
pytest
```