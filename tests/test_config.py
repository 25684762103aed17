import pytest
import torch

from rwrmh.config import BuildConfig, DEFAULT_CONFIG


def test_defaults():
    assert DEFAULT_CONFIG.executor == "thread"
    assert DEFAULT_CONFIG.layer_attribute == "layer"
    assert DEFAULT_CONFIG.default_layer_prefix == "Layer_"
    assert DEFAULT_CONFIG.dtype == torch.float64


def test_invalid_settings():
    with pytest.raises(ValueError):
        BuildConfig(executor="gpu")
    with pytest.raises(ValueError):
        BuildConfig(n_jobs=0)


def test_resolve_n_jobs():
    assert BuildConfig(n_jobs=8).resolve_n_jobs(3) == 3
    assert BuildConfig(n_jobs=2).resolve_n_jobs(5) == 2
    assert BuildConfig(executor="sequential", n_jobs=4).resolve_n_jobs(5) == 1
    assert 1 <= BuildConfig().resolve_n_jobs(2) <= 2


def test_with_options_returns_a_copy():
    custom = DEFAULT_CONFIG.with_options(layer_attribute="type")
    assert custom.layer_attribute == "type"
    assert DEFAULT_CONFIG.layer_attribute == "layer"
