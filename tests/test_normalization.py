import numpy as np
import pytest

from drlcore.normalization import (
    BatchNormalization,
    NormalizationConfig,
    NormalizationData,
    NormalizationEngine,
    NormalizationStrategy,
    NormalizationType,
    create_normalization_engine,
)


def make_data(batch, features, seed=0):
    data = NormalizationData()
    data.resize_for_batch(batch, features)
    rng = np.random.default_rng(seed)
    data.input_data[:] = rng.normal(3.0, 2.0, batch * features)
    return data


class Halver(NormalizationStrategy):
    def normalize(self, data):
        data.output_data = np.asarray(data.input_data) / 2.0

    def name(self):
        return "Halver"


def test_config_defaults():
    cfg = NormalizationConfig()
    assert cfg.batch_size == 0
    assert cfg.feature_size == 0
    assert cfg.epsilon == pytest.approx(1e-5)
    assert cfg.use_global_stats is False


def test_resize_sets_shape_and_validity():
    data = NormalizationData()
    assert data.is_valid()
    data.resize_for_batch(4, 3)
    assert data.config.batch_size == 4
    assert data.config.feature_size == 3
    assert len(data.input_data) == 12
    assert len(data.mean_cache) == 3
    assert data.is_valid()


def test_resize_keeps_values_and_pads_factors():
    data = NormalizationData(scale_factors=[2.0], offset_factors=[5.0])
    data.resize_for_batch(1, 2)
    data.input_data[:] = [7.0, 8.0]
    data.resize_for_batch(2, 2)
    assert data.input_data.tolist()[:2] == [7.0, 8.0]
    assert data.input_data.tolist()[2:] == [0.0, 0.0]
    assert data.scale_factors.tolist() == [2.0, 1.0]
    assert data.offset_factors.tolist() == [5.0, 0.0]


def test_resize_leaves_empty_factors_empty():
    data = NormalizationData()
    data.resize_for_batch(3, 5)
    assert len(data.scale_factors) == 0
    assert len(data.offset_factors) == 0


def test_resize_rejects_negative():
    with pytest.raises(ValueError):
        NormalizationData().resize_for_batch(-1, 2)


def test_is_valid_false_after_manual_change():
    data = make_data(2, 3)
    data.input_data = np.zeros(5)
    assert not data.is_valid()


def test_clear_caches():
    data = make_data(4, 3)
    BatchNormalization().normalize(data)
    assert np.any(data.mean_cache != 0)
    data.clear_caches()
    assert data.mean_cache.tolist() == [0.0, 0.0, 0.0]
    assert data.variance_cache.tolist() == [0.0, 0.0, 0.0]


def test_batch_normalization_statistics():
    data = make_data(16, 4)
    BatchNormalization().normalize(data)
    x = data.input_data.reshape(16, 4)
    out = data.output_data.reshape(16, 4)
    np.testing.assert_allclose(data.mean_cache, x.mean(axis=0))
    np.testing.assert_allclose(data.variance_cache, x.var(axis=0))
    np.testing.assert_allclose(out.mean(axis=0), 0.0, atol=1e-9)
    np.testing.assert_allclose(out.std(axis=0), 1.0, atol=1e-4)


def test_batch_normalization_scale_and_offset():
    data = make_data(8, 2)
    data.scale_factors = np.array([2.0, 0.5])
    data.offset_factors = np.array([1.0, -3.0])
    BatchNormalization().normalize(data)
    out = data.output_data.reshape(8, 2)
    np.testing.assert_allclose(out.mean(axis=0), [1.0, -3.0], atol=1e-9)
    np.testing.assert_allclose(out.std(axis=0), [2.0, 0.5], atol=1e-4)


def test_constant_feature_maps_to_offset():
    data = NormalizationData()
    data.resize_for_batch(3, 1)
    data.input_data[:] = [4.0, 4.0, 4.0]
    BatchNormalization().normalize(data)
    assert data.output_data.tolist() == [0.0, 0.0, 0.0]


def test_strategy_rejects_invalid_data():
    with pytest.raises(ValueError):
        BatchNormalization().normalize(NormalizationData())


def test_validate_input_checks_factor_length():
    data = make_data(2, 3)
    data.scale_factors = np.array([1.0, 2.0])
    assert not BatchNormalization().validate_input(data)
    data.scale_factors = np.array([1.0, 2.0, 3.0])
    assert BatchNormalization().validate_input(data)


def test_engine_normalize_batch_matches_strategy():
    engine = NormalizationEngine()
    data = make_data(5, 3)
    expected = make_data(5, 3)
    BatchNormalization().normalize(expected)
    assert engine.normalize(NormalizationType.BATCH, data) is True
    np.testing.assert_allclose(data.output_data, expected.output_data)


def test_engine_unregistered_kind_fails():
    engine = NormalizationEngine()
    data = make_data(2, 2)
    assert engine.normalize(NormalizationType.LAYER, data) is False
    assert engine.strategy_name(NormalizationType.LAYER) == "Unknown"
    assert engine.strategy_supports_inplace(NormalizationType.GROUP) is False
    assert engine.strategy_requires_global_stats(NormalizationType.INSTANCE) is False
    assert engine.estimate_complexity(NormalizationType.LAYER, data) == 0


def test_engine_invalid_data_fails():
    engine = NormalizationEngine()
    assert engine.normalize(NormalizationType.BATCH, NormalizationData()) is False
    assert engine.performance_stats(NormalizationType.BATCH).iterations == 0


def test_engine_strategy_properties():
    engine = NormalizationEngine()
    data = make_data(6, 7)
    assert engine.strategy_name(NormalizationType.BATCH) == "BatchNormalization"
    assert engine.strategy_requires_global_stats(NormalizationType.BATCH) is True
    assert engine.estimate_complexity(NormalizationType.BATCH, data) == 6 * 7


def test_engine_stats_and_reset():
    engine = NormalizationEngine()
    data = make_data(4, 5)
    engine.normalize(NormalizationType.BATCH, data)
    engine.normalize(NormalizationType.BATCH, data)
    stats = engine.performance_stats(NormalizationType.BATCH)
    assert stats.iterations == 2
    assert stats.batch_size == 4
    assert stats.feature_size == 5
    assert stats.avg_time_per_iteration_us == pytest.approx(stats.total_time_us / 2)
    assert "Iterations: 2" in engine.performance_summary()
    engine.reset_performance_stats()
    assert engine.performance_stats(NormalizationType.BATCH).iterations == 0
    assert "Iterations" not in engine.performance_summary()


def test_register_custom_strategy():
    engine = NormalizationEngine()
    data = make_data(2, 2)
    engine.register_strategy(NormalizationType.LAYER, Halver)
    assert engine.strategy_name(NormalizationType.LAYER) == "Halver"
    assert engine.normalize(NormalizationType.LAYER, data)
    np.testing.assert_allclose(data.output_data, data.input_data / 2.0)


def test_register_replaces_cached_strategy():
    engine = NormalizationEngine()
    engine.preload_all_strategies()
    engine.register_strategy(NormalizationType.BATCH, Halver)
    assert engine.strategy_name(NormalizationType.BATCH) == "Halver"


def test_normalize_batch_all_or_nothing():
    engine = NormalizationEngine()
    good = [(NormalizationType.BATCH, make_data(3, 2)), (NormalizationType.BATCH, make_data(2, 2))]
    assert engine.normalize_batch(good) is True
    mixed = [(NormalizationType.BATCH, make_data(3, 2)), (NormalizationType.LAYER, make_data(2, 2))]
    assert engine.normalize_batch(mixed) is False
    assert engine.performance_stats(NormalizationType.BATCH).iterations == 3


@pytest.mark.parametrize(
    "batch, features, expected",
    [
        (32, 512, NormalizationType.BATCH),
        (1, 600, NormalizationType.LAYER),
        (1, 10, NormalizationType.INSTANCE),
        (4, 10, NormalizationType.LAYER),
    ],
)
def test_auto_select(batch, features, expected):
    data = NormalizationData()
    data.resize_for_batch(batch, features)
    assert NormalizationEngine().auto_select_best_strategy(data) == expected


def test_normalize_auto():
    engine = create_normalization_engine()
    large = make_data(32, 512)
    assert engine.normalize_auto(large) is True
    small = make_data(4, 10)
    assert engine.normalize_auto(small) is False


def test_normalization_type_values():
    assert [NormalizationType(i) for i in range(4)] == [
        NormalizationType.BATCH,
        NormalizationType.LAYER,
        NormalizationType.INSTANCE,
        NormalizationType.GROUP,
    ]
    with pytest.raises(ValueError):
        NormalizationType(4)