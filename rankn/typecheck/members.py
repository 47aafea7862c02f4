"""The entries of a typing context."""

from __future__ import annotations

import abc
from typing import Optional

from rankn.typecheck.types import Name, Type


class ContextMember(abc.ABC):
    """One slot of a context.

    Members are immutable and compared structurally, since locating a slot
    in a context is done by equality."""

    @property
    @abc.abstractmethod
    def name(self) -> Name:
        """The variable this entry is about."""

    def get_type(self) -> Optional[Type]:
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContextMember):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    @abc.abstractmethod
    def _key(self) -> tuple:
        pass


class VarMember(ContextMember):
    """Declares a rigid type variable."""

    def __init__(self, name: Name) -> None:
        self._name = name

    @property
    def name(self) -> Name:
        return self._name

    def _key(self) -> tuple:
        return (self._name,)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f'VarMember({self._name!r})'


class Assumption(ContextMember):
    """Assumes that a term variable has a type."""

    def __init__(self, name: Name, type: Type) -> None:
        self._name = name
        self._type = type

    @property
    def name(self) -> Name:
        return self._name

    def get_type(self) -> Type:
        return self._type

    def _key(self) -> tuple:
        return (self._name, self._type)

    def __str__(self) -> str:
        return f'{self._name} : {self._type}'

    def __repr__(self) -> str:
        return f'Assumption({self._name!r}, {self._type!r})'


class EVarMember(ContextMember):
    """Declares an unsolved existential type variable."""

    def __init__(self, name: Name) -> None:
        self._name = name

    @property
    def name(self) -> Name:
        return self._name

    def _key(self) -> tuple:
        return (self._name,)

    def __str__(self) -> str:
        return f'^{self._name}'

    def __repr__(self) -> str:
        return f'EVarMember({self._name!r})'


class Solved(ContextMember):
    """An existential type variable together with its solution."""

    def __init__(self, name: Name, type: Type) -> None:
        self._name = name
        self._type = type

    @property
    def name(self) -> Name:
        return self._name

    def get_type(self) -> Type:
        return self._type

    def _key(self) -> tuple:
        return (self._name, self._type)

    def __str__(self) -> str:
        return f'^{self._name} = {self._type}'

    def __repr__(self) -> str:
        return f'Solved({self._name!r}, {self._type!r})'


class Marker(ContextMember):
    """Fences off the scope opened for an existential type variable."""

    def __init__(self, name: Name) -> None:
        self._name = name

    @property
    def name(self) -> Name:
        return self._name

    def _key(self) -> tuple:
        return (self._name,)

    def __str__(self) -> str:
        return f'>^{self._name}'

    def __repr__(self) -> str:
        return f'Marker({self._name!r})'
