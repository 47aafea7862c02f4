"""Ordered typing contexts.

A context is read left to right: an entry may only mention variables declared
by entries to its left. Contexts only grow on the right, have one slot
replaced, or are cut back, so they are represented as a persistent snoc list.
Every operation returns a new context and the old one stays valid, which is
what lets a failed subtyping branch leave its input untouched.
"""

from __future__ import annotations

from typing import (
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
    overload,
)

from rankn.typecheck.errors import (
    InvariantViolationError,
    format_missing_member_error,
    format_multiple_entries_error,
)
from rankn.typecheck.members import (
    Assumption,
    ContextMember,
    EVarMember,
    Marker,
    Solved,
    VarMember,
)
from rankn.typecheck.types import (
    All,
    Arr,
    EVar,
    Name,
    Type,
    Unit,
    Var,
    unused_name,
)


class Context(Sequence[ContextMember]):
    def __init__(
        self, _val: Optional[Tuple['Context', ContextMember]] = None
    ) -> None:
        # (everything to the left, rightmost member)
        self._val = _val
        if _val is None:
            self._length = 0
        else:
            self._length = 1 + len(_val[0])

    @classmethod
    def from_iterable(cls, iterable: Iterable[ContextMember]) -> 'Context':
        if isinstance(iterable, cls):
            return iterable
        context = empty_context
        for member in iterable:
            context = cls((context, member))
        return context

    def add(self, member: ContextMember) -> 'Context':
        """Extend the context on the right."""
        return Context((self, member))

    def _prefixes(self) -> Iterator['Context']:
        """Every non-empty prefix of the context, longest first."""
        while self._val is not None:
            yield self
            self = self._val[0]

    def __reversed__(self) -> Iterator[ContextMember]:
        for prefix in self._prefixes():
            assert prefix._val is not None
            yield prefix._val[1]

    def __iter__(self) -> Iterator[ContextMember]:
        return iter(list(reversed(self))[::-1])

    def __len__(self) -> int:
        return self._length

    @overload
    def __getitem__(self, i: int) -> ContextMember:
        pass

    @overload
    def __getitem__(self, i: slice) -> 'Context':
        pass

    def __getitem__(
        self, i: Union[int, slice]
    ) -> Union[ContextMember, 'Context']:
        if isinstance(i, slice):
            return Context.from_iterable(list(self)[i])
        if i < 0:
            i += self._length
        if not 0 <= i < self._length:
            raise IndexError(i)
        return self.drop(self._length - i - 1).last

    @property
    def last(self) -> ContextMember:
        if self._val is None:
            raise IndexError('empty context has no last member')
        return self._val[1]

    def __contains__(self, member: object) -> bool:
        return any(member == m for m in reversed(self))

    def elem(self, member: ContextMember) -> bool:
        return member in self

    def __add__(self, other: object) -> 'Context':
        if not isinstance(other, Context):
            return NotImplemented
        context = self
        for member in other:
            context = context.add(member)
        return context

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Context):
            return NotImplemented
        if self is other:
            return True
        if len(self) != len(other):
            return False
        return all(a == b for a, b in zip(reversed(self), reversed(other)))

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __str__(self) -> str:
        return '[{}]'.format(', '.join(map(str, self)))

    def __repr__(self) -> str:
        return f'Context.from_iterable({list(self)!r})'

    def filter(self, p: Callable[[ContextMember], bool]) -> 'Context':
        return Context.from_iterable([m for m in self if p(m)])

    def drop_last(self) -> 'Context':
        if self._val is None:
            return self
        return self._val[0]

    def drop(self, n: int) -> 'Context':
        """Remove n members from the right end."""
        if n >= self._length:
            return empty_context
        for _ in range(n):
            self = self.drop_last()
        return self

    def _index(self, member: ContextMember) -> Optional[int]:
        members = list(self)
        for i, m in enumerate(members):
            if m == member:
                return i
        return None

    def split_at(
        self, member: ContextMember
    ) -> Optional[Tuple['Context', 'Context']]:
        """Split at the first occurrence of member.

        The prefix is everything strictly to the left of member, and the
        remainder starts with member. None if member is absent."""
        i = self._index(member)
        if i is None:
            return None
        prefix = self.drop(self._length - i)
        return prefix, Context.from_iterable(list(self)[i:])

    def hole(
        self, member: ContextMember
    ) -> Optional[Tuple['Context', 'Context']]:
        """Split at member and drop it: the segments to its left and right."""
        split = self.split_at(member)
        if split is None:
            return None
        left, remainder = split
        return left, Context.from_iterable(list(remainder)[1:])

    def hole2(
        self, m1: ContextMember, m2: ContextMember
    ) -> Optional[Tuple['Context', 'Context', 'Context']]:
        """Make holes at m1 and then at m2, which must be right of m1."""
        outer = self.hole(m1)
        if outer is None:
            return None
        a, rest = outer
        inner = rest.hole(m2)
        if inner is None:
            return None
        b, c = inner
        return a, b, c

    def excise(
        self, member: ContextMember
    ) -> Tuple['Context', 'Context']:
        """Like hole, but a missing member is a broken invariant."""
        result = self.hole(member)
        if result is None:
            raise InvariantViolationError(format_missing_member_error(member))
        return result

    def replace(
        self, member: ContextMember, members: Iterable[ContextMember]
    ) -> 'Context':
        """Put members in the slot member occupies, keeping its position."""
        left, right = self.excise(member)
        for m in members:
            left = left.add(m)
        return left + right

    def truncate(self, member: ContextMember) -> 'Context':
        """Everything strictly to the left of member."""
        left, _ = self.excise(member)
        return left

    def solve(self, name: Name, type: Type) -> 'Context':
        return self.replace(EVarMember(name), [Solved(name, type)])

    def _unique_type(
        self, name: Name, entries: List[ContextMember]
    ) -> Optional[Type]:
        if not entries:
            return None
        if len(entries) > 1:
            raise InvariantViolationError(
                format_multiple_entries_error(name, entries)
            )
        return entries[0].get_type()

    def lookup_assumption(self, name: Name) -> Optional[Type]:
        return self._unique_type(
            name,
            [
                m
                for m in self
                if isinstance(m, Assumption) and m.name == name
            ],
        )

    def lookup_solution(self, name: Name) -> Optional[Type]:
        return self._unique_type(
            name,
            [m for m in self if isinstance(m, Solved) and m.name == name],
        )

    def has_existential(self, name: Name) -> bool:
        """Whether the existential is declared, solved or not."""
        return (
            EVarMember(name) in self or self.lookup_solution(name) is not None
        )

    def unsolved(self) -> List[Name]:
        return [m.name for m in self if isinstance(m, EVarMember)]

    def is_well_formed_type(self, type: Type) -> bool:
        if isinstance(type, Unit):
            return True
        if isinstance(type, Var):
            return VarMember(type.name) in self
        if isinstance(type, EVar):
            return self.has_existential(type.name)
        if isinstance(type, Arr):
            return self.is_well_formed_type(
                type.domain
            ) and self.is_well_formed_type(type.codomain)
        if isinstance(type, All):
            return self.add(VarMember(type.bound_name)).is_well_formed_type(
                type.body
            )
        raise TypeError(f'unknown kind of type: {type!r}')

    def is_well_formed(self) -> bool:
        """Whether every entry is fresh and only mentions what precedes it."""
        checked = empty_context
        for member in self:
            if not checked._admits(member):
                return False
            checked = checked.add(member)
        return True

    def _admits(self, member: ContextMember) -> bool:
        if isinstance(member, Assumption):
            return not any(
                isinstance(m, Assumption) and m.name == member.name
                for m in self
            ) and self.is_well_formed_type(member.get_type())
        if isinstance(member, Marker):
            return member not in self and not self._declares(member.name)
        if self._declares(member.name):
            return False
        if isinstance(member, Solved):
            ty = member.get_type()
            return ty.is_monotype() and self.is_well_formed_type(ty)
        return True

    def _declares(self, name: Name) -> bool:
        return any(
            isinstance(m, (VarMember, EVarMember, Solved)) and m.name == name
            for m in self
        )

    def apply(self, type: Type) -> Type:
        """Substitute every solved existential in type, exhaustively."""
        if isinstance(type, (Unit, Var)):
            return type
        if isinstance(type, EVar):
            solution = self.lookup_solution(type.name)
            if solution is None:
                return type
            return self.apply(solution)
        if isinstance(type, Arr):
            return Arr(self.apply(type.domain), self.apply(type.codomain))
        if isinstance(type, All):
            name, body = type.bound_name, type.body
            # solutions can mention a rigid variable with the binder's name
            solved_variables: set[Name] = set()
            for existential in body.free_existentials():
                solution = self.apply(EVar(existential))
                solved_variables |= solution.free_variables()
            if name in solved_variables:
                name = unused_name(
                    name, solved_variables | body.free_variables()
                )
                body = body.substitute(type.bound_name, Var(name))
            return All(name, self.apply(body))
        raise TypeError(f'unknown kind of type: {type!r}')


empty_context = Context(None)


def is_well_formed_type(context: Context, type: Type) -> bool:
    return context.is_well_formed_type(type)


def apply_context(context: Context, type: Type) -> Type:
    return context.apply(type)


def lookup_assumption(context: Context, name: Name) -> Optional[Type]:
    return context.lookup_assumption(name)


def lookup_solution(context: Context, name: Name) -> Optional[Type]:
    return context.lookup_solution(name)
