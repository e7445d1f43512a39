"""
typed_evolution - Typed expression-tree engine for generative visuals

A genetic programming core where genomes are strongly typed expression trees
mapping coordinates (x, y, t) to booleans, wrapping integers, floats and
colors. Trees can be computed, randomly generated and mutated in place
without ever becoming ill-typed.
"""

__version__ = "0.1.0"
__author__ = "Typed Evolution Project"

from .datatypes import Boolean, Nibble, Byte, UInt, SInt, UNFloat, SNFloat, BitColor
from .context import CoordinateSet, History, ComputeContext
from .config import (
    LEAF, BRANCH, PIPE, MAX_TREE_DEPTH,
    WeightPolicy, GenerationConfig, MutationConfig, EngineSettings
)
from .node_base import FAMILIES, NodeFamily, NodeRecord, VariantSpec, choose_variant
from .tree import Tree, GenomeValidationError
from .genome import Genome, IMAGE_CHANNELS
from .evaluator import Evaluator

__all__ = [
    'Boolean', 'Nibble', 'Byte', 'UInt', 'SInt', 'UNFloat', 'SNFloat', 'BitColor',
    'CoordinateSet', 'History', 'ComputeContext',
    'LEAF', 'BRANCH', 'PIPE', 'MAX_TREE_DEPTH',
    'WeightPolicy', 'GenerationConfig', 'MutationConfig', 'EngineSettings',
    'FAMILIES', 'NodeFamily', 'NodeRecord', 'VariantSpec', 'choose_variant',
    'Tree', 'GenomeValidationError',
    'Genome', 'IMAGE_CHANNELS',
    'Evaluator',
]
