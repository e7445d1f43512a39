"""
typed_evolution/genome.py - Genome representation and JSON serialization
"""
import json
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from .config import EngineSettings, GenerationConfig, MutationConfig
from .context import ComputeContext
from .tree import GenomeValidationError, Tree

logger = logging.getLogger(__name__)

# Output channel -> root family
IMAGE_CHANNELS = {'r': 'Byte', 'g': 'Byte', 'b': 'Byte'}


class Genome:
    """One expression tree per output channel"""

    def __init__(self, trees: Dict[str, Tree]):
        if not trees:
            raise ValueError("A genome needs at least one channel")
        self.trees = trees
        self.age = 0

    @classmethod
    def generate(cls, config: GenerationConfig,
                 channels: Optional[Dict[str, str]] = None) -> 'Genome':
        """Grow a fresh tree for every channel"""
        channels = channels or IMAGE_CHANNELS
        trees = {name: Tree.generate(family, config) for name, family in channels.items()}
        genome = cls(trees)
        logger.debug("Generated genome: complexity %d, depth %d",
                     genome.get_complexity(), genome.get_depth())
        return genome

    @classmethod
    def random(cls, settings: EngineSettings, rng: random.Random = None,
               channels: Optional[Dict[str, str]] = None) -> 'Genome':
        rng = rng or settings.make_rng()
        return cls.generate(settings.generation_config(rng), channels)

    @property
    def channels(self) -> Dict[str, str]:
        return {name: tree.family for name, tree in self.trees.items()}

    def compute(self, context: ComputeContext) -> Dict[str, Any]:
        """Evaluate every channel under the same context"""
        return {channel: tree.compute(context) for channel, tree in self.trees.items()}

    def update_recursively(self, context: ComputeContext) -> None:
        for tree in self.trees.values():
            tree.update_recursively(context)

    def mutate(self, config: MutationConfig) -> int:
        """Mutate every channel in place; returns the number of changes"""
        changes = sum(tree.mutate(config) for tree in self.trees.values())
        if changes:
            self.age = 0
        else:
            self.age += 1
        return changes

    def regenerate(self, channel: str, config: GenerationConfig) -> None:
        """Replace one channel's whole tree"""
        self.trees[channel] = Tree.generate(self.trees[channel].family, config)
        self.age = 0

    def get_complexity(self) -> int:
        """Total number of nodes across all trees"""
        return sum(tree.get_complexity() for tree in self.trees.values())

    def get_depth(self) -> int:
        """Maximum depth across all trees"""
        return max(tree.get_depth() for tree in self.trees.values())

    def copy(self) -> 'Genome':
        new_genome = Genome({name: tree.copy() for name, tree in self.trees.items()})
        new_genome.age = self.age
        return new_genome

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trees': {name: tree.to_dict() for name, tree in self.trees.items()},
            'age': self.age,
            'complexity': self.get_complexity(),
            'depth': self.get_depth(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Genome':
        """Deserialize and validate; any bad channel rejects the whole genome"""
        if not isinstance(data, dict) or not isinstance(data.get('trees'), dict) or not data['trees']:
            raise GenomeValidationError("Genome needs a non-empty 'trees' mapping")
        trees = {}
        for name, tree_data in data['trees'].items():
            try:
                trees[name] = Tree.from_dict(tree_data)
            except GenomeValidationError as e:
                raise GenomeValidationError(f"Channel {name!r}: {e}") from e
        genome = cls(trees)
        age = data.get('age', 0)
        genome.age = age if isinstance(age, int) and not isinstance(age, bool) else 0
        return genome

    def to_json(self, filename: str = None) -> str:
        """Serialize to JSON string or file"""
        json_str = json.dumps(self.to_dict(), indent=2)
        if filename:
            with open(filename, 'w') as f:
                f.write(json_str)
        return json_str

    @classmethod
    def from_json(cls, json_data: str = None, filename: str = None) -> 'Genome':
        """Deserialize from JSON string or file"""
        if filename:
            with open(filename, 'r') as f:
                json_data = f.read()
        try:
            data = json.loads(json_data)
        except ValueError as e:
            raise GenomeValidationError(f"Genome is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def get_all_nodes(self) -> List[Tuple[str, int]]:
        """(channel, arena index) for every reachable node"""
        return [(name, index) for name, tree in self.trees.items() for index, _ in tree.walk()]

    def __str__(self) -> str:
        lines = [f"Genome ({len(self.trees)} channels):"]
        lines.append(f"  Complexity: {self.get_complexity()}, Depth: {self.get_depth()}, Age: {self.age}")
        for name, tree in self.trees.items():
            text = str(tree)
            lines.append(f"  {name} [{tree.family}]: {text[:100]}{'...' if len(text) > 100 else ''}")
        return '\n'.join(lines)
