"""Shorthand for hand-building nested trees in tests."""

from typed_evolution import ComputeContext, CoordinateSet, Tree


def const(value):
    return {'variant': 'Constant', 'value': value}


def node(variant, **children):
    entry = {'variant': variant}
    if children:
        entry['children'] = children
    return entry


def build(family, nested):
    return Tree.from_nested(family, nested)


def make_context(x=0.25, y=-0.5, t=3.0, history=None):
    coords = CoordinateSet.from_floats(x, y, t)
    if history is None:
        return ComputeContext(coords)
    return ComputeContext(coords, history)
