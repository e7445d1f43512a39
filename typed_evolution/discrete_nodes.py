"""
typed_evolution/discrete_nodes.py - Boolean and modular integer node families
"""
from .datatypes import Boolean, Byte, Nibble, SInt, UInt
from .node_base import NodeFamily, branch, leaf, pipe, register_family

# Field layouts reused across families

def pair_fields(family):
    return (('child_a', family), ('child_b', family))


def division_fields(family):
    return (('child_value', family), ('child_divisor', family))


def range_fields(family):
    return (('child_value', family), ('child_range_a', family), ('child_range_b', family))


def if_else_fields(family):
    return (('predicate', 'Boolean'), ('child_a', family), ('child_b', family))


def arithmetic_variants(family):
    """Add/Multiply/Divide/Modulus, shared by every modular integer family"""
    return (
        branch('Add', *pair_fields(family)),
        branch('Multiply', *pair_fields(family)),
        branch('Divide', *division_fields(family)),
        branch('Modulus', *division_fields(family)),
    )


class ModularFamily(NodeFamily):
    """Common compute paths for families whose output is a ModularInt"""

    def compute_arithmetic(self, tree, node, context):
        variant = node.variant
        if variant == 'Add':
            return self.child(tree, node, 'child_a', context).circular_add(
                self.child(tree, node, 'child_b', context))
        elif variant == 'Multiply':
            return self.child(tree, node, 'child_a', context).circular_multiply(
                self.child(tree, node, 'child_b', context))
        elif variant == 'Divide':
            return self.child(tree, node, 'child_value', context).divide(
                self.child(tree, node, 'child_divisor', context))
        elif variant == 'Modulus':
            return self.child(tree, node, 'child_value', context).modulus(
                self.child(tree, node, 'child_divisor', context))
        elif variant == 'Constant':
            return node.value
        elif variant == 'IfElse':
            return self.compute_if_else(tree, node, context)
        return self.unknown_variant(node)


@register_family
class BooleanNodes(NodeFamily):
    name = 'Boolean'
    output_type = Boolean
    VARIANTS = (
        branch('UNFloatLess', *pair_fields('UNFloat')),
        branch('UNFloatMore', *pair_fields('UNFloat')),
        branch('UNFloatBetween', *range_fields('UNFloat')),
        branch('SNFloatLess', *pair_fields('SNFloat')),
        branch('SNFloatMore', *pair_fields('SNFloat')),
        branch('SNFloatBetween', *range_fields('SNFloat')),
        pipe('SNFloatSign', ('child', 'SNFloat')),
        branch('And', *pair_fields('Boolean')),
        branch('Or', *pair_fields('Boolean')),
        pipe('Not', ('child', 'Boolean')),
        branch('BitColorHas', *pair_fields('BitColor')),
        leaf('Constant', Boolean),
        branch('ModifyState', ('child', 'Boolean'), ('child_state', 'CoordMap')),
        branch('IfElse', *if_else_fields('Boolean')),
        branch('ByteEquals', *pair_fields('Byte')),
    )

    def compute(self, tree, node, context) -> Boolean:
        variant = node.variant

        if variant in ('UNFloatLess', 'SNFloatLess'):
            a, b = self._pair(tree, node, context)
            return Boolean(a < b)
        elif variant in ('UNFloatMore', 'SNFloatMore'):
            a, b = self._pair(tree, node, context)
            return Boolean(a > b)
        elif variant in ('UNFloatBetween', 'SNFloatBetween'):
            return Boolean(self._between(tree, node, context))
        elif variant == 'SNFloatSign':
            return Boolean(self.child(tree, node, 'child', context).into_inner() >= 0.0)
        elif variant == 'And':
            # Both sides are always evaluated; trees have no side effects to skip
            a, b = self._pair(tree, node, context)
            return Boolean(a and b)
        elif variant == 'Or':
            a, b = self._pair(tree, node, context)
            return Boolean(a or b)
        elif variant == 'Not':
            return Boolean(not self.child(tree, node, 'child', context).into_inner())
        elif variant == 'BitColorHas':
            return Boolean(self.child(tree, node, 'child_a', context).has_color(
                self.child(tree, node, 'child_b', context)))
        elif variant == 'Constant':
            return node.value
        elif variant == 'ModifyState':
            return self.compute_modify_state(tree, node, context)
        elif variant == 'IfElse':
            return self.compute_if_else(tree, node, context)
        elif variant == 'ByteEquals':
            return Boolean(self.child(tree, node, 'child_a', context)
                           == self.child(tree, node, 'child_b', context))
        return self.unknown_variant(node)

    def _pair(self, tree, node, context):
        return (self.child(tree, node, 'child_a', context).into_inner(),
                self.child(tree, node, 'child_b', context).into_inner())

    def _between(self, tree, node, context) -> bool:
        # Bounds first, then the value; strict open interval in either bound order
        range_a = self.child(tree, node, 'child_range_a', context).into_inner()
        range_b = self.child(tree, node, 'child_range_b', context).into_inner()
        low, high = min(range_a, range_b), max(range_a, range_b)
        value = self.child(tree, node, 'child_value', context).into_inner()
        return low < value < high


@register_family
class NibbleNodes(ModularFamily):
    name = 'Nibble'
    output_type = Nibble
    VARIANTS = (
        leaf('Constant', Nibble),
        *arithmetic_variants('Nibble'),
        branch('FromBooleans', ('a', 'Boolean'), ('b', 'Boolean'), ('c', 'Boolean'), ('d', 'Boolean')),
        pipe('FromByteModulo', ('child', 'Byte')),
        pipe('FromByteDivide', ('child', 'Byte')),
        leaf('FromGametic'),
        branch('IfElse', *if_else_fields('Nibble')),
    )

    def compute(self, tree, node, context) -> Nibble:
        variant = node.variant

        if variant == 'FromBooleans':
            value = 0
            for field, bit in (('a', 1), ('b', 2), ('c', 4), ('d', 8)):
                if self.child(tree, node, field, context).into_inner():
                    value += bit
            return Nibble.new(value)
        elif variant == 'FromByteModulo':
            return Nibble.new_circular(self.child(tree, node, 'child', context).into_inner())
        elif variant == 'FromByteDivide':
            return Nibble.new(self.child(tree, node, 'child', context).into_inner() // Nibble.MODULUS)
        elif variant == 'FromGametic':
            return Nibble.new_circular(context.coordinate_set.get_byte_t().into_inner())
        return self.compute_arithmetic(tree, node, context)


@register_family
class ByteNodes(ModularFamily):
    name = 'Byte'
    output_type = Byte
    VARIANTS = (
        leaf('Constant', Byte),
        *arithmetic_variants('Byte'),
        branch('MultiplyNibbles', *pair_fields('Nibble')),
        pipe('FromIterativeResult', ('child', 'IterativeFunction')),
        leaf('FromGametic'),
        branch('IfElse', *if_else_fields('Byte')),
    )

    def compute(self, tree, node, context) -> Byte:
        variant = node.variant

        if variant == 'MultiplyNibbles':
            # 15 * 15 still fits in a byte
            return Byte.new(self.child(tree, node, 'child_a', context).into_inner()
                            * self.child(tree, node, 'child_b', context).into_inner())
        elif variant == 'FromIterativeResult':
            return self.child(tree, node, 'child', context).iter_final
        elif variant == 'FromGametic':
            return context.coordinate_set.get_byte_t()
        return self.compute_arithmetic(tree, node, context)


@register_family
class UIntNodes(ModularFamily):
    name = 'UInt'
    output_type = UInt
    VARIANTS = (
        leaf('Constant', UInt),
        *arithmetic_variants('UInt'),
        leaf('FromGametic'),
        branch('IfElse', *if_else_fields('UInt')),
    )

    def compute(self, tree, node, context) -> UInt:
        if node.variant == 'FromGametic':
            return context.coordinate_set.get_uint_t()
        return self.compute_arithmetic(tree, node, context)


@register_family
class SIntNodes(ModularFamily):
    name = 'SInt'
    output_type = SInt
    VARIANTS = (
        leaf('Constant', SInt),
        *arithmetic_variants('SInt'),
        branch('IfElse', *if_else_fields('SInt')),
    )

    def compute(self, tree, node, context) -> SInt:
        return self.compute_arithmetic(tree, node, context)
