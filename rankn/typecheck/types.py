"""The grammar of types.

Types are immutable and compared structurally. Rigid variables (Var) and
existential variables (EVar) live in separate namespaces as far as the types
are concerned; the context keeps every declared name unique anyway.
"""

from __future__ import annotations

import abc
from typing import AbstractSet, TypeAlias

Name: TypeAlias = str

# binding strength used when printing
_ARROW_PRECEDENCE = 1
_ATOM_PRECEDENCE = 2


class Type(abc.ABC):
    @abc.abstractmethod
    def is_monotype(self) -> bool:
        """Whether the type is free of universal quantifiers."""

    @abc.abstractmethod
    def free_existentials(self) -> AbstractSet[Name]:
        pass

    @abc.abstractmethod
    def free_variables(self) -> AbstractSet[Name]:
        """The rigid variables not bound by a quantifier inside the type."""

    def occurs(self, name: Name) -> bool:
        return name in self.free_existentials()

    @abc.abstractmethod
    def substitute(self, name: Name, replacement: Type) -> Type:
        """Replace the free rigid variable `name` with `replacement`.

        Binders that would capture a free variable of the replacement are
        renamed first."""

    @abc.abstractmethod
    def _to_string(self, precedence: int) -> str:
        pass

    def __str__(self) -> str:
        return self._to_string(0)

    def __eq__(self, other: object) -> bool:
        return NotImplemented

    @abc.abstractmethod
    def __hash__(self) -> int:
        pass


class Unit(Type):
    def is_monotype(self) -> bool:
        return True

    def free_existentials(self) -> AbstractSet[Name]:
        return frozenset()

    def free_variables(self) -> AbstractSet[Name]:
        return frozenset()

    def substitute(self, name: Name, replacement: Type) -> Type:
        return self

    def _to_string(self, precedence: int) -> str:
        return '1'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return isinstance(other, Unit)

    def __hash__(self) -> int:
        return hash(Unit)

    def __repr__(self) -> str:
        return 'Unit()'


class Var(Type):
    """A rigid type variable."""

    def __init__(self, name: Name) -> None:
        self._name = name

    @property
    def name(self) -> Name:
        return self._name

    def is_monotype(self) -> bool:
        return True

    def free_existentials(self) -> AbstractSet[Name]:
        return frozenset()

    def free_variables(self) -> AbstractSet[Name]:
        return frozenset([self._name])

    def substitute(self, name: Name, replacement: Type) -> Type:
        if self._name == name:
            return replacement
        return self

    def _to_string(self, precedence: int) -> str:
        return self._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return isinstance(other, Var) and self._name == other._name

    def __hash__(self) -> int:
        return hash((Var, self._name))

    def __repr__(self) -> str:
        return f'Var({self._name!r})'


class EVar(Type):
    """An existential type variable, standing for an unknown monotype."""

    def __init__(self, name: Name) -> None:
        self._name = name

    @property
    def name(self) -> Name:
        return self._name

    def is_monotype(self) -> bool:
        return True

    def free_existentials(self) -> AbstractSet[Name]:
        return frozenset([self._name])

    def free_variables(self) -> AbstractSet[Name]:
        return frozenset()

    def substitute(self, name: Name, replacement: Type) -> Type:
        return self

    def _to_string(self, precedence: int) -> str:
        return f'^{self._name}'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return isinstance(other, EVar) and self._name == other._name

    def __hash__(self) -> int:
        return hash((EVar, self._name))

    def __repr__(self) -> str:
        return f'EVar({self._name!r})'


class Arr(Type):
    """The function type. Contravariant in the domain."""

    def __init__(self, domain: Type, codomain: Type) -> None:
        self._domain = domain
        self._codomain = codomain

    @property
    def domain(self) -> Type:
        return self._domain

    @property
    def codomain(self) -> Type:
        return self._codomain

    def is_monotype(self) -> bool:
        return self._domain.is_monotype() and self._codomain.is_monotype()

    def free_existentials(self) -> AbstractSet[Name]:
        return (
            self._domain.free_existentials()
            | self._codomain.free_existentials()
        )

    def free_variables(self) -> AbstractSet[Name]:
        return self._domain.free_variables() | self._codomain.free_variables()

    def substitute(self, name: Name, replacement: Type) -> Type:
        return Arr(
            self._domain.substitute(name, replacement),
            self._codomain.substitute(name, replacement),
        )

    def _to_string(self, precedence: int) -> str:
        string = '{} -> {}'.format(
            self._domain._to_string(_ATOM_PRECEDENCE),
            self._codomain._to_string(_ARROW_PRECEDENCE),
        )
        if precedence > _ARROW_PRECEDENCE:
            return f'({string})'
        return string

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return (
            isinstance(other, Arr)
            and self._domain == other._domain
            and self._codomain == other._codomain
        )

    def __hash__(self) -> int:
        return hash((Arr, self._domain, self._codomain))

    def __repr__(self) -> str:
        return f'Arr({self._domain!r}, {self._codomain!r})'


class All(Type):
    """Universal quantification over a rigid variable."""

    def __init__(self, bound_name: Name, body: Type) -> None:
        self._bound_name = bound_name
        self._body = body

    @property
    def bound_name(self) -> Name:
        return self._bound_name

    @property
    def body(self) -> Type:
        return self._body

    def instantiate(self, replacement: Type) -> Type:
        """The body with the bound variable replaced."""
        return self._body.substitute(self._bound_name, replacement)

    def is_monotype(self) -> bool:
        return False

    def free_existentials(self) -> AbstractSet[Name]:
        return self._body.free_existentials()

    def free_variables(self) -> AbstractSet[Name]:
        return self._body.free_variables() - {self._bound_name}

    def substitute(self, name: Name, replacement: Type) -> Type:
        # the binder shadows name
        if self._bound_name == name or name not in self.free_variables():
            return self
        replacement_variables = replacement.free_variables()
        if self._bound_name not in replacement_variables:
            return All(
                self._bound_name, self._body.substitute(name, replacement)
            )
        avoid = self._body.free_variables() | replacement_variables
        bound_name = unused_name(self._bound_name, avoid)
        body = self._body.substitute(self._bound_name, Var(bound_name))
        return All(bound_name, body.substitute(name, replacement))

    def _to_string(self, precedence: int) -> str:
        string = f'forall {self._bound_name}. {self._body}'
        if precedence > 0:
            return f'({string})'
        return string

    # NOTE: Equality is syntactic, including the bound name. The engine never
    # needs alpha-equivalence because it always opens quantifiers with fresh
    # names before comparing.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return (
            isinstance(other, All)
            and self._bound_name == other._bound_name
            and self._body == other._body
        )

    def __hash__(self) -> int:
        return hash((All, self._bound_name, self._body))

    def __repr__(self) -> str:
        return f'All({self._bound_name!r}, {self._body!r})'


def unused_name(name: Name, avoid: AbstractSet[Name]) -> Name:
    """Prime name until it is not in avoid."""
    while name in avoid:
        name += "'"
    return name
