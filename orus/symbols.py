"""Scoped symbol table used while compiling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from orus.typesys import Type


@dataclass(frozen=True)
class Token:
    """A piece of source text with its line number and character offset."""

    lexeme: str
    line: int = 1
    offset: int = 0

    @property
    def length(self) -> int:
        return len(self.lexeme)

    def column(self, source: str) -> int:
        """One-based column of the token within ``source``."""
        line_start = source.rfind("\n", 0, self.offset) + 1
        return self.offset - line_start + 1


@dataclass
class Symbol:
    """A variable, function or module name known to the compiler."""

    name: str
    token: Token
    type: Optional[Type] = None
    scope: int = 0
    index: int = 0
    mutable: bool = False
    const: bool = False
    is_module: bool = False
    module: Any = None
    active: bool = True
    defined: bool = True


class SymbolRedeclaredError(Exception):
    """Raised when a name is declared twice in the same scope."""

    def __init__(self, name: str, scope: int) -> None:
        super().__init__(f"symbol `{name}` already defined in scope {scope}")
        self.name = name
        self.scope = scope


class SymbolTable:
    """Symbols in declaration order; leaving a scope deactivates its symbols."""

    def __init__(self) -> None:
        self._symbols: list[Symbol] = []

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def add(
        self,
        name: str,
        token: Token,
        type_: Optional[Type] = None,
        scope: int = 0,
        index: int = 0,
        mutable: bool = False,
        const: bool = False,
        is_module: bool = False,
        module: Any = None,
    ) -> Symbol:
        """Declare a symbol; raises SymbolRedeclaredError on an active duplicate in ``scope``."""
        if any(s.scope == scope and s.active and s.name == name for s in self._symbols):
            raise SymbolRedeclaredError(name, scope)
        symbol = Symbol(
            name=name,
            token=token,
            type=type_,
            scope=scope,
            index=index,
            mutable=mutable,
            const=const,
            is_module=is_module,
            module=module,
        )
        self._symbols.append(symbol)
        return symbol

    def find(self, name: str) -> Optional[Symbol]:
        """Return the most recent active symbol with this name, or None."""
        return next((s for s in reversed(self._symbols) if s.active and s.name == name), None)

    def find_any(self, name: str) -> Optional[Symbol]:
        """Return the most recent symbol with this name, active or not, or None."""
        return next((s for s in reversed(self._symbols) if s.name == name), None)

    def remove_scope(self, scope: int) -> None:
        """Deactivate the trailing symbols declared at ``scope`` or deeper."""
        for symbol in reversed(self._symbols):
            if symbol.scope < scope:
                break
            symbol.active = False

    def active_symbols(self) -> Iterator[Symbol]:
        """Yield the active symbols in declaration order."""
        return (s for s in self._symbols if s.active)