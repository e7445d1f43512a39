"""Engine settings from defaults, JSON files and the environment."""

import random

import pytest

from typed_evolution.config import MAX_TREE_DEPTH, EngineSettings


def test_defaults():
    settings = EngineSettings()
    assert settings.max_depth == 6
    assert settings.mutation_probability == 0.05
    assert settings.seed is None
    assert settings.weights.to_dict() == {'leaf': 1.0, 'branch': 1.0, 'pipe': 1.0}


def test_environment_overrides():
    env = {
        'TYPED_EVOLUTION_MAX_DEPTH': '3',
        'TYPED_EVOLUTION_SEED': '42',
        'TYPED_EVOLUTION_BRANCH_WEIGHT': '2.5',
        'TYPED_EVOLUTION_PIPE_WEIGHT': '',
    }
    settings = EngineSettings.from_env(env)
    assert settings.max_depth == 3
    assert settings.seed == 42
    assert settings.weights.branch == 2.5
    assert settings.weights.pipe == 1.0


def test_explicit_overrides_beat_environment():
    settings = EngineSettings.from_env({'TYPED_EVOLUTION_MAX_DEPTH': '3'}, max_depth=8, seed=None)
    assert settings.max_depth == 8


def test_json_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    EngineSettings(max_depth=4, mutation_probability=0.2, seed=5).to_json(str(path))
    loaded = EngineSettings.from_json(filename=str(path))
    assert loaded.to_dict() == EngineSettings(max_depth=4, mutation_probability=0.2, seed=5).to_dict()


def test_invalid_settings():
    with pytest.raises(ValueError):
        EngineSettings(colour='blue')
    with pytest.raises(ValueError):
        EngineSettings(mutation_probability=2.0)
    with pytest.raises(ValueError):
        EngineSettings(leaf_weight=0.0)


def test_max_depth_is_clamped():
    assert EngineSettings(max_depth=1000).max_depth == MAX_TREE_DEPTH - 1


def test_configs_built_from_settings():
    settings = EngineSettings(max_depth=4, mutation_probability=0.3)
    rng = random.Random(0)
    generation = settings.generation_config(rng)
    mutation = settings.mutation_config(rng)
    assert generation.depth_budget == 4
    assert mutation.probability == 0.3
    assert settings.mutation_config(rng, probability=0.0).probability == 0.0
    assert mutation.generation_config(3).depth_budget == 1
    assert mutation.generation_config(9).depth_budget == 0
