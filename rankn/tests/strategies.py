from rankn.typecheck.context import Context, empty_context
from rankn.typecheck.members import (
    Assumption,
    ContextMember,
    EVarMember,
    Marker,
    Solved,
    VarMember,
)
from rankn.typecheck.types import All, Arr, EVar, Type, Unit, Var
from hypothesis.strategies import (
    DrawFn,
    SearchStrategy,
    builds,
    composite,
    integers,
    just,
    recursive,
    sampled_from,
)


def monotypes(context: Context) -> SearchStrategy[Type]:
    """Monotypes that are well-formed under context."""
    leaves: SearchStrategy[Type] = just(Unit())
    variables = [m.name for m in context if isinstance(m, VarMember)]
    existentials = [
        m.name for m in context if isinstance(m, (EVarMember, Solved))
    ]
    if variables:
        leaves |= sampled_from(variables).map(Var)
    if existentials:
        leaves |= sampled_from(existentials).map(EVar)
    return recursive(
        leaves,
        lambda children: builds(Arr, children, children),
        max_leaves=8,
    )


# Binder names include ones a CheckState generates.
_binder_names = ['a', 'b', 'e0', 'e1', 't0', 't1', 't2']


@composite
def polytypes(
    draw: DrawFn, context: Context, bound: tuple = (), depth: int = 3
) -> Type:
    """Possibly polymorphic types that are well-formed under context."""
    kinds = ['leaf', 'arrow', 'forall'] if depth > 0 else ['leaf']
    kind = draw(sampled_from(kinds))
    if kind == 'arrow':
        return Arr(
            draw(polytypes(context, bound, depth - 1)),
            draw(polytypes(context, bound, depth - 1)),
        )
    if kind == 'forall':
        name = draw(sampled_from(_binder_names))
        return All(name, draw(polytypes(context, bound + (name,), depth - 1)))
    leaves: list[Type] = [Unit()]
    leaves += [Var(name) for name in bound]
    leaves += [Var(m.name) for m in context if isinstance(m, VarMember)]
    leaves += [
        EVar(m.name)
        for m in context
        if isinstance(m, (EVarMember, Solved))
    ]
    return draw(sampled_from(leaves))


@composite
def contexts(draw: DrawFn, max_size: int = 6) -> Context:
    """Well-formed contexts."""
    context = empty_context
    for i in range(draw(integers(min_value=0, max_value=max_size))):
        kind = draw(
            sampled_from(['var', 'evar', 'solved', 'assumption', 'marker'])
        )
        name = draw(sampled_from([f'n{i}', f'e{i}', f't{i}']))
        member: ContextMember
        if kind == 'var':
            member = VarMember(name)
        elif kind == 'evar':
            member = EVarMember(name)
        elif kind == 'solved':
            member = Solved(name, draw(monotypes(context)))
        elif kind == 'assumption':
            member = Assumption(f'x{i}', draw(monotypes(context)))
        else:
            member = Marker(name)
        context = context.add(member)
    return context


@composite
def contexts_with_member(draw: DrawFn) -> tuple[Context, ContextMember]:
    context = draw(contexts().filter(bool))
    return context, draw(sampled_from(list(context)))
