"""The grammar of terms.

The subtyping engine never inspects terms. They are here because context
assumptions are indexed by term variables, and the expression-level checker
that drives the engine works over this tree.
"""

from __future__ import annotations

import abc
from typing import AbstractSet, Iterable

from rankn.typecheck.types import Name, Type


class Expr(abc.ABC):
    @property
    @abc.abstractmethod
    def children(self) -> Iterable[Expr]:
        pass

    def free_variables(self) -> AbstractSet[Name]:
        names: AbstractSet[Name] = frozenset()
        for child in self.children:
            names |= child.free_variables()
        return names

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expr):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    @abc.abstractmethod
    def _key(self) -> tuple:
        pass


class UnitExpr(Expr):
    @property
    def children(self) -> Iterable[Expr]:
        return []

    def _key(self) -> tuple:
        return ()

    def __str__(self) -> str:
        return '()'

    def __repr__(self) -> str:
        return 'UnitExpr()'


class VarExpr(Expr):
    def __init__(self, name: Name) -> None:
        self.name = name

    @property
    def children(self) -> Iterable[Expr]:
        return []

    def free_variables(self) -> AbstractSet[Name]:
        return frozenset([self.name])

    def _key(self) -> tuple:
        return (self.name,)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'VarExpr({self.name!r})'


class Ann(Expr):
    """A term annotated with the type it should be checked against."""

    def __init__(self, expr: Expr, type: Type) -> None:
        self.expr = expr
        self.type = type

    @property
    def children(self) -> Iterable[Expr]:
        return [self.expr]

    def _key(self) -> tuple:
        return (self.expr, self.type)

    def __str__(self) -> str:
        return f'({self.expr} : {self.type})'

    def __repr__(self) -> str:
        return f'Ann({self.expr!r}, {self.type!r})'


class Lam(Expr):
    def __init__(self, parameter: Name, body: Expr) -> None:
        self.parameter = parameter
        self.body = body

    @property
    def children(self) -> Iterable[Expr]:
        return [self.body]

    def free_variables(self) -> AbstractSet[Name]:
        return self.body.free_variables() - {self.parameter}

    def _key(self) -> tuple:
        return (self.parameter, self.body)

    def __str__(self) -> str:
        return f'(\\{self.parameter}. {self.body})'

    def __repr__(self) -> str:
        return f'Lam({self.parameter!r}, {self.body!r})'


class App(Expr):
    def __init__(self, function: Expr, argument: Expr) -> None:
        self.function = function
        self.argument = argument

    @property
    def children(self) -> Iterable[Expr]:
        return [self.function, self.argument]

    def _key(self) -> tuple:
        return (self.function, self.argument)

    def __str__(self) -> str:
        return f'({self.function} {self.argument})'

    def __repr__(self) -> str:
        return f'App({self.function!r}, {self.argument!r})'
