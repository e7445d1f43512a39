"""
typed_evolution/tree.py - Arena-backed expression trees

A tree is a flat list of NodeRecords addressed by index. Composite records
hold the indices of their children, so mutation replaces a subtree by
overwriting one slot, and serialization is a plain table.
"""
import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from . import continuous_nodes, discrete_nodes  # noqa: F401  (registers the families)
from .config import MAX_TREE_DEPTH, GenerationConfig, MutationConfig
from .node_base import FAMILIES, NodeRecord, choose_variant, get_family

logger = logging.getLogger(__name__)


class GenomeValidationError(ValueError):
    """A serialized tree or genome failed validation and was not loaded"""


class Tree:
    """Typed expression tree with a single root of family `family`"""

    def __init__(self, family: str, nodes: Optional[List[NodeRecord]] = None, root: int = 0):
        get_family(family)
        self.family = family
        self.nodes = nodes if nodes is not None else []
        self.root = root

    # -- compute / update -------------------------------------------------

    def compute(self, context, index: Optional[int] = None):
        """Evaluate the subtree at `index` (default: the root)"""
        node = self.nodes[self.root if index is None else index]
        return FAMILIES[node.family].compute(self, node, context)

    def update(self, context, index: Optional[int] = None) -> None:
        index = self.root if index is None else index
        FAMILIES[self.nodes[index].family].update(self, index, context)

    def update_recursively(self, context) -> None:
        """Visit every node top-down with the live context"""
        for index, _ in self.walk():
            self.update(context, index)

    # -- generation / mutation ------------------------------------------

    @classmethod
    def generate(cls, family: str, config: GenerationConfig) -> 'Tree':
        """Grow a fresh random tree of the given family"""
        tree = cls(family)
        tree.root = tree._grow(family, config)
        return tree

    def _grow(self, family_name: str, config: GenerationConfig) -> int:
        spec = choose_variant(get_family(family_name), config)
        index = len(self.nodes)
        node = NodeRecord(family_name, spec.name)
        self.nodes.append(node)

        if spec.value_type is not None:
            node.value = spec.value_type.random(config.rng)

        child_config = config.descend()
        for field, child_family in spec.fields:
            node.children[field] = self._grow(child_family, child_config)
        return index

    def mutate(self, config: MutationConfig) -> int:
        """
        Apply mutation pressure independently at every node.

        Each visited node is regrown from scratch with the configured
        probability; otherwise its constant (if any) may be re-rolled and
        the walk continues into its children. Returns the number of
        changes made.
        """
        changes = 0
        stack = [(self.root, 0)]
        while stack:
            index, depth = stack.pop()
            node = self.nodes[index]

            if config.should_mutate():
                new_index = self._grow(node.family, config.generation_config(depth))
                self.nodes[index] = self.nodes[new_index]
                changes += 1
                continue

            spec = get_family(node.family).spec(node.variant)
            if spec.value_type is not None and config.should_mutate():
                node.value = spec.value_type.random(config.rng)
                changes += 1

            for field in reversed(spec.field_names):
                stack.append((node.children[field], depth + 1))

        if changes:
            self.compact()
            logger.debug("Mutated %s tree: %d changes, %d nodes", self.family, changes, len(self.nodes))
        return changes

    def compact(self) -> None:
        """Drop unreachable records and renumber in pre-order"""
        order = [index for index, _ in self.walk()]
        remap = {old: new for new, old in enumerate(order)}
        self.nodes = [
            NodeRecord(
                self.nodes[old].family,
                self.nodes[old].variant,
                {field: remap[child] for field, child in self.nodes[old].children.items()},
                self.nodes[old].value,
            )
            for old in order
        ]
        self.root = 0

    # -- inspection -------------------------------------------------------

    def walk(self, index: Optional[int] = None) -> Iterator[Tuple[int, int]]:
        """Yield (index, depth) in pre-order without recursing"""
        stack = [(self.root if index is None else index, 0)]
        while stack:
            current, depth = stack.pop()
            yield current, depth
            node = self.nodes[current]
            spec = get_family(node.family).spec(node.variant)
            for field in reversed(spec.field_names):
                stack.append((node.children[field], depth + 1))

    def get_depth(self) -> int:
        """Number of levels; a lone leaf has depth 1"""
        return 1 + max(depth for _, depth in self.walk())

    def get_complexity(self) -> int:
        return sum(1 for _ in self.walk())

    def variant_counts(self) -> Dict[str, int]:
        counts = {}
        for index, _ in self.walk():
            node = self.nodes[index]
            key = f"{node.family}.{node.variant}"
            counts[key] = counts.get(key, 0) + 1
        return counts

    def copy(self) -> 'Tree':
        return Tree(self.family, [node.copy() for node in self.nodes], self.root)

    def __str__(self):
        return self._format(self.root)

    def _format(self, index: int) -> str:
        node = self.nodes[index]
        spec = get_family(node.family).spec(node.variant)
        parts = [self._format(node.children[field]) for field in spec.field_names]
        if node.value is not None:
            parts.insert(0, repr(node.value.to_json()))
        if not parts:
            return node.variant
        return f"{node.variant}({', '.join(parts)})"

    # -- serialization -----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Flat table form used for persistence"""
        nodes = []
        for node in self.nodes:
            entry = {'family': node.family, 'variant': node.variant}
            if node.children:
                entry['children'] = dict(node.children)
            if node.value is not None:
                entry['value'] = node.value.to_json()
            nodes.append(entry)
        return {'family': self.family, 'root': self.root, 'nodes': nodes}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Tree':
        """Validate a flat table and build a tree; nothing is built on failure"""
        family, root, nodes = _validate_table(data)
        return cls(family, nodes, root)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_data: str) -> 'Tree':
        try:
            data = json.loads(json_data)
        except ValueError as e:
            raise GenomeValidationError(f"Tree is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_nested(self, index: Optional[int] = None) -> Dict[str, Any]:
        """Readable nested form: {'variant', 'value'?, 'children'?}"""
        node = self.nodes[self.root if index is None else index]
        entry = {'variant': node.variant}
        if node.value is not None:
            entry['value'] = node.value.to_json()
        if node.children:
            entry['children'] = {field: self.to_nested(child) for field, child in node.children.items()}
        return entry

    @classmethod
    def from_nested(cls, family: str, nested: Dict[str, Any]) -> 'Tree':
        """Build from the nested form; values may be raw JSON or datatype instances"""
        table = []

        def flatten(family_name, entry, depth):
            if depth > MAX_TREE_DEPTH:
                raise GenomeValidationError(f"Tree deeper than {MAX_TREE_DEPTH} levels")
            if not isinstance(entry, dict) or 'variant' not in entry:
                raise GenomeValidationError(f"Malformed nested node: {entry!r}")
            index = len(table)
            record = {'family': family_name, 'variant': entry['variant']}
            table.append(record)
            if 'value' in entry:
                value = entry['value']
                record['value'] = value.to_json() if hasattr(value, 'to_json') else value
            spec = _lookup_spec(family_name, entry['variant'])
            children = entry.get('children', {})
            if not isinstance(children, dict) or set(children) != set(spec.field_names):
                raise GenomeValidationError(
                    f"{family_name}.{spec.name} expects fields {spec.field_names}, got {children!r}")
            record['children'] = {}
            for field, child_family in spec.fields:
                record['children'][field] = flatten(child_family, children[field], depth + 1)
            return index

        flatten(family, nested, 1)
        return cls.from_dict({'family': family, 'root': 0, 'nodes': table})


def _lookup_spec(family_name: str, variant: str):
    if not isinstance(family_name, str) or family_name not in FAMILIES:
        raise GenomeValidationError(f"Unknown node family: {family_name!r}")
    family = FAMILIES[family_name]
    if not isinstance(variant, str) or variant not in family.variants:
        raise GenomeValidationError(f"Unknown {family_name} variant: {variant!r}")
    return family.variants[variant]


def _validate_table(data: Any) -> Tuple[str, int, List[NodeRecord]]:
    if not isinstance(data, dict):
        raise GenomeValidationError("Tree table must be a mapping")
    family = data.get('family')
    root = data.get('root', 0)
    raw_nodes = data.get('nodes')
    if not isinstance(family, str) or family not in FAMILIES:
        raise GenomeValidationError(f"Unknown node family: {family!r}")
    if not isinstance(raw_nodes, list) or not raw_nodes:
        raise GenomeValidationError("Tree table needs a non-empty 'nodes' list")
    if isinstance(root, bool) or not isinstance(root, int) or not 0 <= root < len(raw_nodes):
        raise GenomeValidationError(f"Root index {root!r} out of range")

    nodes = []
    for position, entry in enumerate(raw_nodes):
        if not isinstance(entry, dict):
            raise GenomeValidationError(f"Node {position} is not a mapping")
        spec = _lookup_spec(entry.get('family'), entry.get('variant'))

        children = entry.get('children', {})
        if not isinstance(children, dict) or set(children) != set(spec.field_names):
            raise GenomeValidationError(
                f"Node {position} ({entry['family']}.{spec.name}) expects fields "
                f"{spec.field_names}, got {children!r}")
        for field, child in children.items():
            if isinstance(child, bool) or not isinstance(child, int) or not 0 <= child < len(raw_nodes):
                raise GenomeValidationError(f"Node {position} field {field!r} points outside the table")

        value = None
        if spec.value_type is not None:
            if 'value' not in entry:
                raise GenomeValidationError(f"Node {position} ({spec.name}) is missing its value")
            try:
                value = spec.value_type.from_json(entry['value'])
            except ValueError as e:
                raise GenomeValidationError(f"Node {position}: {e}") from e
        elif entry.get('value') is not None:
            raise GenomeValidationError(f"Node {position} ({spec.name}) carries an unexpected value")

        nodes.append(NodeRecord(entry['family'], spec.name, dict(children), value))

    if nodes[root].family != family:
        raise GenomeValidationError(f"Root node is {nodes[root].family}, expected {family}")

    # Unique ownership plus full reachability rules out sharing and cycles
    owners = {}
    for position, node in enumerate(nodes):
        spec = FAMILIES[node.family].variants[node.variant]
        for field, child_family in spec.fields:
            child = node.children[field]
            if child == root or child in owners:
                raise GenomeValidationError(f"Node {child} has more than one parent")
            owners[child] = position
            if nodes[child].family != child_family:
                raise GenomeValidationError(
                    f"Node {position} field {field!r} needs {child_family}, got {nodes[child].family}")

    seen = 0
    stack = [(root, 1)]
    while stack:
        index, depth = stack.pop()
        if depth > MAX_TREE_DEPTH:
            raise GenomeValidationError(f"Tree deeper than {MAX_TREE_DEPTH} levels")
        seen += 1
        stack.extend((child, depth + 1) for child in nodes[index].children.values())
    if seen != len(nodes):
        raise GenomeValidationError(f"{len(nodes) - seen} nodes are unreachable from the root")

    return family, root, nodes
