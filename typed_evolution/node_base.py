"""
typed_evolution/node_base.py - Node records, variant tables and the family contract
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple

from .config import BRANCH, LEAF, NODE_KINDS, PIPE, GenerationConfig


class NodeRecord:
    """One slot of a tree arena: a variant tag, child indices and an optional constant"""

    __slots__ = ('family', 'variant', 'children', 'value')

    def __init__(self, family: str, variant: str, children: Optional[Dict[str, int]] = None,
                 value: Any = None):
        self.family = family
        self.variant = variant
        self.children = children if children is not None else {}
        self.value = value

    def copy(self) -> 'NodeRecord':
        return NodeRecord(self.family, self.variant, dict(self.children), self.value)

    def __repr__(self):
        return f"NodeRecord({self.family}.{self.variant}, children={self.children}, value={self.value!r})"


class VariantSpec:
    """Static description of one variant: kind, typed child fields and weight"""

    def __init__(self, name: str, kind: str, fields: Sequence[Tuple[str, str]] = (),
                 value_type: type = None, weight: float = 1.0):
        if kind not in NODE_KINDS:
            raise ValueError(f"Unknown node kind {kind!r} for variant {name}")
        if kind == LEAF and fields:
            raise ValueError(f"Leaf variant {name} cannot have child fields")
        if kind == PIPE and len(fields) != 1:
            raise ValueError(f"Pipe variant {name} must have exactly one child field")
        if kind == BRANCH and len(fields) < 2:
            raise ValueError(f"Branch variant {name} needs at least two child fields")
        self.name = name
        self.kind = kind
        self.fields = tuple(fields)
        self.value_type = value_type
        self.weight = weight

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(field for field, _ in self.fields)

    def __repr__(self):
        return f"VariantSpec({self.name}, {self.kind})"


def leaf(name: str, value_type: type = None, weight: float = 1.0) -> VariantSpec:
    return VariantSpec(name, LEAF, (), value_type, weight)


def pipe(name: str, field: Tuple[str, str], weight: float = 1.0) -> VariantSpec:
    return VariantSpec(name, PIPE, (field,), None, weight)


def branch(name: str, *fields: Tuple[str, str], weight: float = 1.0) -> VariantSpec:
    return VariantSpec(name, BRANCH, fields, None, weight)


class NodeFamily(ABC):
    """
    A closed set of variants sharing one output type.

    Subclasses declare `name`, `output_type` and a `VARIANTS` table, and
    implement `compute`. Children are evaluated through the tree so every
    family walks the same arena.
    """

    name = None
    output_type = None
    VARIANTS: Tuple[VariantSpec, ...] = ()

    def __init__(self):
        self.variants = {spec.name: spec for spec in self.VARIANTS}
        if len(self.variants) != len(self.VARIANTS):
            raise ValueError(f"Duplicate variant names in family {self.name}")
        if not any(spec.kind == LEAF and spec.weight > 0 for spec in self.VARIANTS):
            raise ValueError(f"Family {self.name} has no leaf variant; generation could not terminate")

    @abstractmethod
    def compute(self, tree, node: NodeRecord, context):
        """Evaluate `node` under `context`"""
        pass

    def update(self, tree, index: int, context) -> None:
        """Per-node hook called by update traversals; stateless families ignore it"""
        pass

    def spec(self, variant: str) -> VariantSpec:
        try:
            return self.variants[variant]
        except KeyError:
            raise ValueError(f"Unknown {self.name} variant: {variant}") from None

    # Helpers shared by the concrete families

    def child(self, tree, node: NodeRecord, field: str, context):
        return tree.compute(context, node.children[field])

    def compute_if_else(self, tree, node: NodeRecord, context):
        # Only the selected branch is evaluated
        if self.child(tree, node, 'predicate', context).into_inner():
            return self.child(tree, node, 'child_a', context)
        return self.child(tree, node, 'child_b', context)

    def compute_modify_state(self, tree, node: NodeRecord, context):
        coordinate_set = self.child(tree, node, 'child_state', context)
        return self.child(tree, node, 'child', context.with_coordinate_set(coordinate_set))

    def unknown_variant(self, node: NodeRecord):
        raise ValueError(f"Unknown {self.name} variant: {node.variant}")


FAMILIES: Dict[str, NodeFamily] = {}


def register_family(cls):
    """Class decorator adding a family instance to the registry"""
    if cls.name in FAMILIES:
        raise ValueError(f"Family {cls.name} registered twice")
    FAMILIES[cls.name] = cls()
    return cls


def get_family(name: str) -> NodeFamily:
    try:
        return FAMILIES[name]
    except KeyError:
        raise ValueError(f"Unknown node family: {name}") from None


def choose_variant(family: NodeFamily, config: GenerationConfig) -> VariantSpec:
    """Weighted pick over the family table, biased toward leaves as the budget shrinks"""
    candidates = []
    weights = []
    for spec in family.VARIANTS:
        weight = spec.weight * config.weights.class_weight(spec.kind, config.depth_budget, config.max_depth)
        if weight > 0:
            candidates.append(spec)
            weights.append(weight)
    return config.rng.choices(candidates, weights=weights)[0]
