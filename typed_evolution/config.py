"""
typed_evolution/config.py - Generation/mutation configuration and engine settings
"""
import json
import logging
import os
import random
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

LEAF = 'leaf'
BRANCH = 'branch'
PIPE = 'pipe'
NODE_KINDS = (LEAF, BRANCH, PIPE)

# Hard ceiling on tree depth, applied at generation and at load time
MAX_TREE_DEPTH = 32

ENV_PREFIX = 'TYPED_EVOLUTION_'


class WeightPolicy:
    """Scales per-variant weights by node kind and remaining depth budget"""

    def __init__(self, leaf: float = 1.0, branch: float = 1.0, pipe: float = 1.0):
        for name, weight in (('leaf', leaf), ('branch', branch), ('pipe', pipe)):
            if weight < 0:
                raise ValueError(f"{name} weight must be non-negative, got {weight}")
        if leaf <= 0:
            raise ValueError("leaf weight must be positive so generation can terminate")
        self.leaf = float(leaf)
        self.branch = float(branch)
        self.pipe = float(pipe)

    def class_weight(self, kind: str, depth_budget: int, max_depth: int) -> float:
        """
        Leaves keep a constant weight; branches and pipes fade linearly as
        the budget runs out and vanish once it reaches zero.
        """
        if kind == LEAF:
            return self.leaf
        if depth_budget <= 0 or max_depth <= 0:
            return 0.0
        fraction = min(depth_budget, max_depth) / max_depth
        if kind == BRANCH:
            return self.branch * fraction
        if kind == PIPE:
            return self.pipe * fraction
        raise ValueError(f"Unknown node kind: {kind}")

    def to_dict(self) -> Dict[str, float]:
        return {'leaf': self.leaf, 'branch': self.branch, 'pipe': self.pipe}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeightPolicy':
        return cls(data.get('leaf', 1.0), data.get('branch', 1.0), data.get('pipe', 1.0))


class GenerationConfig:
    """RNG stream, remaining depth budget and weight table for one generate call"""

    def __init__(self, rng: random.Random, depth_budget: int, max_depth: Optional[int] = None,
                 weights: Optional[WeightPolicy] = None):
        if depth_budget < 0:
            raise ValueError(f"depth_budget must be non-negative, got {depth_budget}")
        self.rng = rng
        self.max_depth = clamp_depth(depth_budget if max_depth is None else max_depth)
        self.depth_budget = min(depth_budget, self.max_depth)
        self.weights = weights or WeightPolicy()

    def descend(self) -> 'GenerationConfig':
        return GenerationConfig(self.rng, max(self.depth_budget - 1, 0), self.max_depth, self.weights)


class MutationConfig:
    """Per-node reroll probability plus what is needed to grow replacements"""

    def __init__(self, rng: random.Random, probability: float, max_depth: int,
                 weights: Optional[WeightPolicy] = None):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"mutation probability must be in [0, 1], got {probability}")
        self.rng = rng
        self.probability = probability
        self.max_depth = clamp_depth(max_depth)
        self.weights = weights or WeightPolicy()

    def should_mutate(self) -> bool:
        # Zero never draws from the stream, so p=0 leaves the RNG untouched too
        if self.probability <= 0.0:
            return False
        return self.rng.random() < self.probability

    def generation_config(self, depth: int) -> GenerationConfig:
        """Config for regrowing a node sitting `depth` levels below the root"""
        return GenerationConfig(self.rng, max(self.max_depth - depth, 0), self.max_depth, self.weights)


def clamp_depth(depth: int) -> int:
    """Limit a depth budget so generated trees never exceed MAX_TREE_DEPTH levels"""
    limit = MAX_TREE_DEPTH - 1
    if depth > limit:
        logger.warning("Requested depth %d exceeds ceiling, clamping to %d", depth, limit)
        return limit
    return max(depth, 0)


class EngineSettings:
    """User-facing knobs, loadable from JSON files and environment variables"""

    DEFAULTS = {
        'max_depth': 6,
        'mutation_probability': 0.05,
        'leaf_weight': 1.0,
        'branch_weight': 1.0,
        'pipe_weight': 1.0,
        'seed': None,
        'history_frames': 4,
    }

    def __init__(self, **overrides):
        unknown = set(overrides) - set(self.DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        values = dict(self.DEFAULTS)
        values.update(overrides)

        self.max_depth = clamp_depth(int(values['max_depth']))
        self.mutation_probability = float(values['mutation_probability'])
        self.weights = WeightPolicy(float(values['leaf_weight']), float(values['branch_weight']),
                                    float(values['pipe_weight']))
        self.seed = None if values['seed'] is None else int(values['seed'])
        self.history_frames = max(int(values['history_frames']), 1)

        if not 0.0 <= self.mutation_probability <= 1.0:
            raise ValueError(f"mutation_probability must be in [0, 1], got {self.mutation_probability}")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)

    def generation_config(self, rng: random.Random) -> GenerationConfig:
        return GenerationConfig(rng, self.max_depth, self.max_depth, self.weights)

    def mutation_config(self, rng: random.Random, probability: Optional[float] = None) -> MutationConfig:
        if probability is None:
            probability = self.mutation_probability
        return MutationConfig(rng, probability, self.max_depth, self.weights)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_depth': self.max_depth,
            'mutation_probability': self.mutation_probability,
            'leaf_weight': self.weights.leaf,
            'branch_weight': self.weights.branch,
            'pipe_weight': self.weights.pipe,
            'seed': self.seed,
            'history_frames': self.history_frames,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EngineSettings':
        return cls(**data)

    def to_json(self, filename: str = None) -> str:
        json_str = json.dumps(self.to_dict(), indent=2)
        if filename:
            with open(filename, 'w') as f:
                f.write(json_str)
        return json_str

    @classmethod
    def from_json(cls, json_data: str = None, filename: str = None) -> 'EngineSettings':
        if filename:
            with open(filename, 'r') as f:
                json_data = f.read()
        return cls.from_dict(json.loads(json_data))

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides) -> 'EngineSettings':
        """Read TYPED_EVOLUTION_<SETTING> variables; explicit overrides win"""
        environ = os.environ if environ is None else environ
        values = {}
        for key in cls.DEFAULTS:
            raw = environ.get(ENV_PREFIX + key.upper())
            if raw is not None and raw != '':
                values[key] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values:
            logger.debug("Settings overrides: %s", values)
        return cls(**values)
