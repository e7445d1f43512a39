"""Weighted generation: termination, determinism and well-typedness."""

import random

import pytest

from typed_evolution.config import BRANCH, LEAF, MAX_TREE_DEPTH, PIPE, GenerationConfig, WeightPolicy
from typed_evolution.node_base import FAMILIES, NodeFamily, choose_variant, leaf, pipe
from typed_evolution.tree import Tree

from helpers import make_context

FAMILY_NAMES = sorted(FAMILIES)


@pytest.mark.parametrize("family", FAMILY_NAMES)
def test_zero_budget_always_yields_a_leaf(family):
    for seed in range(40):
        tree = Tree.generate(family, GenerationConfig(random.Random(seed), 0))
        root = tree.nodes[tree.root]
        assert tree.get_complexity() == 1
        assert FAMILIES[family].spec(root.variant).kind == LEAF


@pytest.mark.parametrize("family", FAMILY_NAMES)
def test_generated_trees_respect_the_depth_budget(family):
    for seed in range(25):
        tree = Tree.generate(family, GenerationConfig(random.Random(seed), 4))
        assert tree.get_depth() <= 5


@pytest.mark.parametrize("family", FAMILY_NAMES)
def test_generated_trees_compute_their_output_type(family):
    context = make_context(x=0.3, y=-0.7, t=12.0)
    for seed in range(20):
        tree = Tree.generate(family, GenerationConfig(random.Random(seed), 4))
        assert isinstance(tree.compute(context), FAMILIES[family].output_type)


def test_same_seed_same_tree():
    first = Tree.generate('Byte', GenerationConfig(random.Random(99), 6))
    second = Tree.generate('Byte', GenerationConfig(random.Random(99), 6))
    assert first.to_dict() == second.to_dict()


def test_fresh_trees_are_compact_preorder():
    tree = Tree.generate('Boolean', GenerationConfig(random.Random(5), 5))
    assert tree.root == 0
    assert [index for index, _ in tree.walk()] == list(range(len(tree.nodes)))


def test_class_weights_fade_with_budget():
    weights = WeightPolicy(leaf=2.0, branch=4.0, pipe=1.0)
    assert weights.class_weight(LEAF, 0, 6) == 2.0
    assert weights.class_weight(BRANCH, 6, 6) == 4.0
    assert weights.class_weight(BRANCH, 3, 6) == 2.0
    assert weights.class_weight(PIPE, 3, 6) == 0.5
    assert weights.class_weight(BRANCH, 0, 6) == 0.0
    assert weights.class_weight(PIPE, 0, 6) == 0.0


def test_weight_policy_requires_positive_leaf_weight():
    with pytest.raises(ValueError):
        WeightPolicy(leaf=0.0)
    with pytest.raises(ValueError):
        WeightPolicy(branch=-1.0)


def test_choose_variant_with_only_leaves_allowed():
    config = GenerationConfig(random.Random(1), 0)
    family = FAMILIES['Nibble']
    picks = {choose_variant(family, config).name for _ in range(100)}
    assert picks <= {'Constant', 'FromGametic'}


def test_zero_leaf_bias_still_grows_when_budget_allows():
    config = GenerationConfig(random.Random(2), 5, weights=WeightPolicy(leaf=1e-9, branch=1.0, pipe=0.0))
    assert choose_variant(FAMILIES['SInt'], config).kind == BRANCH


def test_descend_never_goes_negative():
    config = GenerationConfig(random.Random(0), 1)
    assert config.descend().depth_budget == 0
    assert config.descend().descend().depth_budget == 0
    assert config.descend().max_depth == 1


def test_depth_budget_is_clamped_to_the_ceiling():
    config = GenerationConfig(random.Random(0), 500)
    assert config.depth_budget == MAX_TREE_DEPTH - 1


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        GenerationConfig(random.Random(0), -1)


def test_family_without_leaf_cannot_be_built():
    class Endless(NodeFamily):
        name = 'Endless'
        VARIANTS = (pipe('Loop', ('child', 'Endless')),)

        def compute(self, tree, node, context):
            return None

    with pytest.raises(ValueError):
        Endless()

    class Fine(NodeFamily):
        name = 'Fine'
        VARIANTS = (leaf('Only'),)

        def compute(self, tree, node, context):
            return None

    assert Fine().spec('Only').kind == LEAF
