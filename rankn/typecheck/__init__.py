"""The rankn subtyping engine.

The algorithm is the algorithmic subtyping judgment from "Joshua Dunfield and
Neelakantan R. Krishnaswami: Complete and Easy Bidirectional Typechecking for
Higher-Rank Polymorphism, ICFP 2013." Instantiation of existentials is done by
articulating them into arrows of fresh existentials and then comparing
structurally, so the instantiation judgments share the subtyping rules.

Each rule works on a private copy of the caller's CheckState. Contexts are
persistent, so a failed query leaves the caller's state exactly as it was.
"""

from __future__ import annotations

from typing import Optional

from typing_extensions import Never

from rankn.logging import get_logger
from rankn.typecheck.context import (
    Context,
    apply_context,
    empty_context,
    is_well_formed_type,
    lookup_assumption,
    lookup_solution,
)
from rankn.typecheck.errors import (
    InvariantViolationError,
    StaticAnalysisError,
    TypeError,
    format_escaping_type_error,
    format_not_monotype_error,
    format_occurs_error,
    format_subtyping_error,
)
from rankn.typecheck.members import (
    Assumption,
    ContextMember,
    EVarMember,
    Marker,
    Solved,
    VarMember,
)
from rankn.typecheck.state import CheckState, fresh_existential
from rankn.typecheck.types import All, Arr, EVar, Name, Type, Unit, Var

__all__ = [
    'All',
    'Arr',
    'Assumption',
    'CheckState',
    'Context',
    'ContextMember',
    'EVar',
    'EVarMember',
    'InvariantViolationError',
    'Marker',
    'Solved',
    'StaticAnalysisError',
    'Type',
    'TypeError',
    'Unit',
    'Var',
    'VarMember',
    'apply_context',
    'check_subtype',
    'empty_context',
    'fresh_existential',
    'is_well_formed_type',
    'lookup_assumption',
    'lookup_solution',
    'subtype',
]

_logger = get_logger(__name__)


def subtype(state: CheckState, a: Type, b: Type) -> Optional[CheckState]:
    """Decide a <: b under state.context.

    Returns the extended state, or None if the judgment does not hold. Both
    types must already be well-formed under state.context."""
    working = state.copy()
    try:
        _subtype(working, a, b)
    except StaticAnalysisError as e:
        _logger.debug('{} </: {}: {}', a, b, e)
        return None
    return working


def check_subtype(state: CheckState, a: Type, b: Type) -> CheckState:
    """Like subtype, but raises a rankn TypeError saying why it failed."""
    working = state.copy()
    _subtype(working, a, b)
    return working


def _fail(a: Type, b: Type) -> Never:
    raise TypeError(
        format_subtyping_error(a, b),
        is_occurs_check_fail=None,
        query=(a, b),
    )


def _is_solved(state: CheckState, ty: Type) -> bool:
    return (
        isinstance(ty, EVar)
        and state.context.lookup_solution(ty.name) is not None
    )


def _subtype(state: CheckState, a: Type, b: Type) -> None:
    _logger.debug('{} <:? {} in {}', a, b, state.context)
    if isinstance(a, Unit) and isinstance(b, Unit):
        return
    if isinstance(a, Var) and isinstance(b, Var) and a.name == b.name:
        return
    if isinstance(a, EVar) and isinstance(b, EVar) and a.name == b.name:
        return
    if isinstance(a, Arr) and isinstance(b, Arr):
        _subtype(state, b.domain, a.domain)
        # the domains may have solved existentials in the codomains
        _subtype(
            state,
            state.context.apply(a.codomain),
            state.context.apply(b.codomain),
        )
        return
    if isinstance(b, All):
        name = state.fresh_variable()
        scope = VarMember(name)
        state.context = state.context.add(scope)
        _subtype(state, a, b.instantiate(Var(name)))
        state.context = state.context.truncate(scope)
        return
    if isinstance(a, All):
        name = state.fresh_existential()
        marker = Marker(name)
        state.context = state.context.add(marker).add(EVarMember(name))
        _subtype(state, a.instantiate(EVar(name)), b)
        state.context = state.context.truncate(marker)
        return
    if _is_solved(state, a) or _is_solved(state, b):
        _subtype(state, state.context.apply(a), state.context.apply(b))
        return
    if isinstance(a, EVar) and isinstance(b, Arr):
        articulated = _articulate(state, a.name, b)
        _subtype(state, articulated, b)
        return
    if isinstance(a, Arr) and isinstance(b, EVar):
        articulated = _articulate(state, b.name, a)
        _subtype(state, a, articulated)
        return
    if isinstance(a, EVar):
        _solve(state, a.name, b)
        return
    if isinstance(b, EVar):
        _solve(state, b.name, a)
        return
    _fail(a, b)


def _occurs_check(name: Name, ty: Type) -> None:
    if ty.occurs(name):
        raise TypeError(
            format_occurs_error(name, ty),
            is_occurs_check_fail=True,
            query=(EVar(name), ty),
        )


def _check_solution(name: Name, ty: Type) -> None:
    _occurs_check(name, ty)
    if not ty.is_monotype():
        raise TypeError(
            format_not_monotype_error(name, ty),
            is_occurs_check_fail=False,
            query=(EVar(name), ty),
        )


def _articulate(state: CheckState, name: Name, ty: Arr) -> Arr:
    """Solve the existential to an arrow between two fresh existentials.

    The new existentials take the solved one's place in the context, so
    anything they are later solved to is in scope where it was declared.
    The arrow itself may be polymorphic, since only its parts are compared
    with the new existentials."""
    _occurs_check(name, ty)
    domain, codomain = state.fresh_existential(), state.fresh_existential()
    articulated = Arr(EVar(domain), EVar(codomain))
    state.context = state.context.replace(
        EVarMember(name),
        [EVarMember(domain), EVarMember(codomain), Solved(name, articulated)],
    )
    _logger.debug('articulated ^{} as {}', name, articulated)
    return articulated


def _solve(state: CheckState, name: Name, ty: Type) -> None:
    _check_solution(name, ty)
    left, right = state.context.excise(EVarMember(name))
    if left.is_well_formed_type(ty):
        state.context = left.add(Solved(name, ty)) + right
        _logger.debug('solved ^{} := {}', name, ty)
        return
    # An existential declared later can be solved to this one instead.
    if isinstance(ty, EVar) and EVarMember(ty.name) in right:
        state.context = state.context.solve(ty.name, EVar(name))
        _logger.debug('solved ^{} := ^{}', ty.name, name)
        return
    raise TypeError(
        format_escaping_type_error(name, ty),
        is_occurs_check_fail=False,
        query=(EVar(name), ty),
    )
