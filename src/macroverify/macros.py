"""
Macro roles.

A macro is a class deriving from one or more role classes and overriding the
matching classmethods. Freestanding roles (`ExpressionMacro`,
`DeclarationMacro`) are invoked as `#name(...)`; attached roles (`MemberMacro`,
`PeerMacro`, `ExtensionMacro`) as `@name` in front of a `struct` or `func`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .syntax import Attribute, MacroExpansion, Syntax

if TYPE_CHECKING:
    from .context import MacroExpansionContext


class Macro:
    pass


class ExpressionMacro(Macro):
    @classmethod
    def expand_expression(cls, node: MacroExpansion, context: MacroExpansionContext) -> Syntax:
        raise NotImplementedError


class DeclarationMacro(Macro):
    @classmethod
    def expand_declaration(cls, node: MacroExpansion, context: MacroExpansionContext) -> Sequence[Syntax]:
        raise NotImplementedError


class MemberMacro(Macro):
    @classmethod
    def expand_members(
        cls, node: Attribute, declaration: Syntax, context: MacroExpansionContext
    ) -> Sequence[Syntax]:
        raise NotImplementedError


class PeerMacro(Macro):
    @classmethod
    def expand_peers(
        cls, node: Attribute, declaration: Syntax, context: MacroExpansionContext
    ) -> Sequence[Syntax]:
        raise NotImplementedError


class ExtensionMacro(Macro):
    @classmethod
    def expand_extensions(
        cls,
        node: Attribute,
        declaration: Syntax,
        type_name: str,
        conformances: Sequence[str],
        context: MacroExpansionContext,
    ) -> Sequence[Syntax]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class MacroSpec:
    """A macro plus the conformances its extension role may add."""

    macro: type[Macro]
    conformances: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not (isinstance(self.macro, type) and issubclass(self.macro, Macro)):
            raise TypeError(f"not a macro class: {self.macro!r}")
        object.__setattr__(self, "conformances", tuple(self.conformances))

    @property
    def attached(self) -> bool:
        return issubclass(self.macro, (MemberMacro, PeerMacro, ExtensionMacro))


MacroTable = Mapping[str, "MacroSpec | type[Macro]"]


def macro_specs(macros: MacroTable) -> dict[str, MacroSpec]:
    """Normalize a macro table; bare classes get no conformances."""
    out: dict[str, MacroSpec] = {}
    for name, entry in macros.items():
        out[name] = entry if isinstance(entry, MacroSpec) else MacroSpec(entry)
    return out
