from __future__ import annotations

import builtins
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

if TYPE_CHECKING:
    from rankn.typecheck.members import ContextMember
    from rankn.typecheck.types import Type


class StaticAnalysisError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class TypeError(StaticAnalysisError, builtins.TypeError):
    """A subtyping judgment that does not hold.

    is_occurs_check_fail is None if it is not applicable to the error (e.g. the
    two sides are not an existential and a type). query is the pair of types
    being compared when the failure was detected.
    """

    def __init__(
        self,
        message: str,
        is_occurs_check_fail: Optional[bool],
        query: Optional[Tuple[Type, Type]] = None,
    ) -> None:
        super().__init__(message)
        self.is_occurs_check_fail = is_occurs_check_fail
        self.query = query

    def __repr__(self) -> str:
        return (
            f'TypeError({self.message!r}, is_occurs_check_fail='
            f'{self.is_occurs_check_fail!r}, query={self.query!r})'
        )


class InvariantViolationError(builtins.RuntimeError):
    """The ordering or uniqueness invariant of a context was broken.

    This is a bug in whatever built the context, never a type error, so it is
    not a StaticAnalysisError and the engine does not catch it."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def format_subtyping_error(subtype: Type, supertype: Type) -> str:
    return f'{subtype} cannot be a subtype of {supertype}'


def format_occurs_error(name: str, ty: Type) -> str:
    return (
        f'^{name} cannot be solved to {ty} because it would form a recursive '
        'type'
    )


def format_not_monotype_error(name: str, ty: Type) -> str:
    return f'^{name} cannot be solved to {ty} because it is polymorphic'


def format_escaping_type_error(name: str, ty: Type) -> str:
    return f'{ty} is not in scope where ^{name} was declared'


def format_multiple_entries_error(
    name: str, entries: Iterable[ContextMember]
) -> str:
    return (
        f'internal error: multiple types for variable {name}: '
        f'{list(entries)!r}'
    )


def format_missing_member_error(member: ContextMember) -> str:
    return f'internal error: {member} is no longer in the context'

