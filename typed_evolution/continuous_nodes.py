"""
typed_evolution/continuous_nodes.py - Float, color, coordinate-map and iterative families

These are the sibling families the discrete nodes draw on for comparisons,
color tests, coordinate rebinding and escape-time samples.
"""
import math
from typing import Tuple

from .context import CoordinateSet
from .datatypes import BitColor, Byte, SNFloat, UNFloat
from .node_base import NodeFamily, branch, leaf, pipe, register_family

ESCAPE_ITERATIONS = 64
ESCAPE_RADIUS_SQUARED = 4.0


@register_family
class UNFloatNodes(NodeFamily):
    name = 'UNFloat'
    output_type = UNFloat
    VARIANTS = (
        leaf('Constant', UNFloat),
        leaf('FromX'),
        leaf('FromY'),
        leaf('FromHistory'),
        pipe('FromSNFloat', ('child', 'SNFloat')),
        pipe('Invert', ('child', 'UNFloat')),
        branch('Multiply', ('child_a', 'UNFloat'), ('child_b', 'UNFloat')),
        branch('IfElse', ('predicate', 'Boolean'), ('child_a', 'UNFloat'), ('child_b', 'UNFloat')),
        branch('ModifyState', ('child', 'UNFloat'), ('child_state', 'CoordMap')),
    )

    def compute(self, tree, node, context) -> UNFloat:
        variant = node.variant
        coords = context.coordinate_set

        if variant == 'Constant':
            return node.value
        elif variant == 'FromX':
            return coords.x.to_unsigned()
        elif variant == 'FromY':
            return coords.y.to_unsigned()
        elif variant == 'FromHistory':
            return context.history.sample(0, coords.x, coords.y)
        elif variant == 'FromSNFloat':
            return self.child(tree, node, 'child', context).to_unsigned()
        elif variant == 'Invert':
            return UNFloat(1.0 - self.child(tree, node, 'child', context).into_inner())
        elif variant == 'Multiply':
            return UNFloat(self.child(tree, node, 'child_a', context).into_inner()
                           * self.child(tree, node, 'child_b', context).into_inner())
        elif variant == 'IfElse':
            return self.compute_if_else(tree, node, context)
        elif variant == 'ModifyState':
            return self.compute_modify_state(tree, node, context)
        return self.unknown_variant(node)


@register_family
class SNFloatNodes(NodeFamily):
    name = 'SNFloat'
    output_type = SNFloat
    VARIANTS = (
        leaf('Constant', SNFloat),
        leaf('X'),
        leaf('Y'),
        pipe('Negate', ('child', 'SNFloat')),
        pipe('Sin', ('child', 'SNFloat')),
        pipe('FromUNFloat', ('child', 'UNFloat')),
        branch('Multiply', ('child_a', 'SNFloat'), ('child_b', 'SNFloat')),
        branch('IfElse', ('predicate', 'Boolean'), ('child_a', 'SNFloat'), ('child_b', 'SNFloat')),
    )

    def compute(self, tree, node, context) -> SNFloat:
        variant = node.variant

        if variant == 'Constant':
            return node.value
        elif variant == 'X':
            return context.coordinate_set.x
        elif variant == 'Y':
            return context.coordinate_set.y
        elif variant == 'Negate':
            return SNFloat(-self.child(tree, node, 'child', context).into_inner())
        elif variant == 'Sin':
            return SNFloat.new_clamped(math.sin(math.pi * self.child(tree, node, 'child', context).into_inner()))
        elif variant == 'FromUNFloat':
            return self.child(tree, node, 'child', context).to_signed()
        elif variant == 'Multiply':
            return SNFloat(self.child(tree, node, 'child_a', context).into_inner()
                           * self.child(tree, node, 'child_b', context).into_inner())
        elif variant == 'IfElse':
            return self.compute_if_else(tree, node, context)
        return self.unknown_variant(node)


@register_family
class BitColorNodes(NodeFamily):
    name = 'BitColor'
    output_type = BitColor
    VARIANTS = (
        leaf('Constant', BitColor),
        pipe('FromNibble', ('child', 'Nibble')),
        branch('FromBooleans', ('red', 'Boolean'), ('green', 'Boolean'), ('blue', 'Boolean')),
        branch('IfElse', ('predicate', 'Boolean'), ('child_a', 'BitColor'), ('child_b', 'BitColor')),
    )

    def compute(self, tree, node, context) -> BitColor:
        variant = node.variant

        if variant == 'Constant':
            return node.value
        elif variant == 'FromNibble':
            return BitColor(self.child(tree, node, 'child', context).into_inner() & 0b111)
        elif variant == 'FromBooleans':
            return BitColor.from_components(
                self.child(tree, node, 'red', context).into_inner(),
                self.child(tree, node, 'green', context).into_inner(),
                self.child(tree, node, 'blue', context).into_inner(),
            )
        elif variant == 'IfElse':
            return self.compute_if_else(tree, node, context)
        return self.unknown_variant(node)


@register_family
class CoordMapNodes(NodeFamily):
    """Coordinate transforms; the output feeds ModifyState rebinding"""

    name = 'CoordMap'
    output_type = CoordinateSet
    VARIANTS = (
        leaf('Identity'),
        branch('Shift', ('child_x', 'SNFloat'), ('child_y', 'SNFloat')),
        pipe('Scale', ('child', 'UNFloat')),
        pipe('Rotate', ('child', 'SNFloat')),
        branch('Chain', ('child_a', 'CoordMap'), ('child_b', 'CoordMap')),
    )

    def compute(self, tree, node, context) -> CoordinateSet:
        variant = node.variant
        coords = context.coordinate_set

        if variant == 'Identity':
            return coords
        elif variant == 'Shift':
            return coords.get_coord_shifted(
                self.child(tree, node, 'child_x', context).into_inner(),
                self.child(tree, node, 'child_y', context).into_inner(),
            )
        elif variant == 'Scale':
            # Factor in [1, 4]; anything pushed past the edge tiles back in
            factor = 1.0 + 3.0 * self.child(tree, node, 'child', context).into_inner()
            return CoordinateSet(
                SNFloat.new_circular(coords.x.into_inner() * factor),
                SNFloat.new_circular(coords.y.into_inner() * factor),
                coords.t,
            )
        elif variant == 'Rotate':
            angle = math.pi * self.child(tree, node, 'child', context).into_inner()
            x, y = coords.x.into_inner(), coords.y.into_inner()
            return CoordinateSet(
                SNFloat.new_circular(x * math.cos(angle) - y * math.sin(angle)),
                SNFloat.new_circular(x * math.sin(angle) + y * math.cos(angle)),
                coords.t,
            )
        elif variant == 'Chain':
            first = self.child(tree, node, 'child_a', context)
            return self.child(tree, node, 'child_b', context.with_coordinate_set(first))
        return self.unknown_variant(node)


class IterativeResult:
    """Outcome of an escape-time iteration"""

    __slots__ = ('iter_final', 'z_final')

    def __init__(self, iter_final: Byte, z_final: Tuple[SNFloat, SNFloat]):
        self.iter_final = iter_final
        self.z_final = z_final

    def __repr__(self):
        return f"IterativeResult(iter_final={self.iter_final}, z_final={self.z_final})"


def escape_time(z_re: float, z_im: float, c_re: float, c_im: float) -> IterativeResult:
    """Iterate z <- z^2 + c until |z| leaves radius 2 or the budget is spent"""
    iterations = 0
    while iterations < ESCAPE_ITERATIONS and z_re * z_re + z_im * z_im <= ESCAPE_RADIUS_SQUARED:
        z_re, z_im = z_re * z_re - z_im * z_im + c_re, 2.0 * z_re * z_im + c_im
        iterations += 1
    return IterativeResult(
        Byte.new(iterations),
        (SNFloat.new_clamped(z_re * 0.5), SNFloat.new_clamped(z_im * 0.5)),
    )


@register_family
class IterativeFunctionNodes(NodeFamily):
    name = 'IterativeFunction'
    output_type = IterativeResult
    VARIANTS = (
        leaf('Mandelbrot'),
        branch('Julia', ('child_c_re', 'SNFloat'), ('child_c_im', 'SNFloat')),
    )

    def compute(self, tree, node, context) -> IterativeResult:
        variant = node.variant
        x = context.coordinate_set.x.into_inner()
        y = context.coordinate_set.y.into_inner()

        if variant == 'Mandelbrot':
            return escape_time(0.0, 0.0, 1.5 * x - 0.5, 1.5 * y)
        elif variant == 'Julia':
            return escape_time(
                1.5 * x, 1.5 * y,
                self.child(tree, node, 'child_c_re', context).into_inner(),
                self.child(tree, node, 'child_c_im', context).into_inner(),
            )
        return self.unknown_variant(node)
