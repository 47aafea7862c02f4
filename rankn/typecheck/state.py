"""Checking sessions."""

from __future__ import annotations

from rankn.typecheck.context import Context, empty_context
from rankn.typecheck.members import Assumption
from rankn.typecheck.types import Name


class CheckState:
    """A context together with the session's fresh-name counter.

    The counter belongs to the session, so independent sessions never share
    or contend for names. Rigid and existential names come from the same
    counter, which keeps every name declared in the context unique. Numbers
    whose name is already declared in the context are skipped."""

    def __init__(
        self,
        context: Context = empty_context,
        next_name: int = 0,
        existential_prefix: str = 'e',
        variable_prefix: str = 't',
    ) -> None:
        self.context = context
        self.next_name = next_name
        self._existential_prefix = existential_prefix
        self._variable_prefix = variable_prefix

    def _fresh(self, prefix: str) -> Name:
        taken = {
            m.name for m in self.context if not isinstance(m, Assumption)
        }
        while True:
            name = f'{prefix}{self.next_name}'
            self.next_name += 1
            if name not in taken:
                return name

    def fresh_existential(self) -> Name:
        return self._fresh(self._existential_prefix)

    def fresh_variable(self) -> Name:
        return self._fresh(self._variable_prefix)

    def copy(self) -> CheckState:
        return CheckState(
            self.context,
            self.next_name,
            self._existential_prefix,
            self._variable_prefix,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CheckState):
            return NotImplemented
        return (
            self.context == other.context
            and self.next_name == other.next_name
        )

    # mutable
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f'CheckState({self.context!r}, next_name={self.next_name!r})'
        )


def fresh_existential(state: CheckState) -> Name:
    return state.fresh_existential()
