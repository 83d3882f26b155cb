"""
Тесты согласованности последовательного и многопроцессного прохода.

Критически важно: разбиение прохода по разделам не должно менять
назначения и итоговые центроиды (с точностью до порядка суммирования).
"""

import numpy as np
import pytest

from pixelcluster.core.engine import ClusterEngine
from pixelcluster.core.errors import ConfigurationError, DimensionMismatchError
from pixelcluster.core.parallel import MultiprocessingConfig, ParallelClusterEngine
from pixelcluster.data.sources import SequenceSampleSource


def _run(engine, initial, source, passes):
    engine.initialize(SequenceSampleSource(initial))
    for _ in range(passes):
        engine.iterate(source)
    return engine.get_clusters()


class TestPassConsistency:
    """Последовательный и параллельный проход дают одинаковый результат."""

    def test_sequential_vs_multiprocessing(self, small_dataset, array_source):
        X, initial_centroids = small_dataset
        source = array_source(X, block_size=8)

        sequential = _run(ClusterEngine(2, 2), initial_centroids, source, passes=5)
        with ParallelClusterEngine(
            2, 2, mp=MultiprocessingConfig(n_processes=2)
        ) as engine:
            parallel = _run(engine, initial_centroids, source, passes=5)

        np.testing.assert_array_equal(sequential.member_counts, parallel.member_counts)
        np.testing.assert_array_equal(sequential.indices, parallel.indices)
        np.testing.assert_allclose(
            sequential.means,
            parallel.means,
            rtol=1e-10,
            atol=1e-10,
            err_msg="Sequential and multiprocessing passes disagree",
        )

    def test_chunk_size_partitioning(self, medium_dataset, array_source):
        X, initial_centroids = medium_dataset
        source = array_source(X, block_size=32)

        sequential = _run(ClusterEngine(3, 10), initial_centroids, source, passes=3)
        with ParallelClusterEngine(
            3, 10, mp=MultiprocessingConfig(n_processes=2, chunk_size=17)
        ) as engine:
            parallel = _run(engine, initial_centroids, source, passes=3)

        np.testing.assert_array_equal(sequential.member_counts, parallel.member_counts)
        np.testing.assert_allclose(sequential.means, parallel.means, rtol=1e-10, atol=1e-10)

    def test_non_array_source_falls_back(self, simple_2d_dataset, list_source):
        X, initial_centroids = simple_2d_dataset

        with ParallelClusterEngine(2, 2, mp=MultiprocessingConfig(n_processes=2)) as engine:
            clusters = _run(engine, initial_centroids, list_source(X), passes=1)
            assert engine._pool is None

        np.testing.assert_allclose(clusters.means, [[1.0, 1.0], [11.0, 11.0]])

    def test_empty_cluster_kept_in_parallel_pass(self, array_source):
        X = np.array([[0.0], [1.0], [2.0], [3.0]])

        with ParallelClusterEngine(2, 1, mp=MultiprocessingConfig(n_processes=2)) as engine:
            clusters = _run(engine, np.array([[0.0], [100.0]]), array_source(X), passes=1)

        assert clusters[0].member_count == 0
        assert clusters[0].centroid[0] == 100.0
        assert clusters[1].centroid[0] == 1.5

    def test_close_releases_pool(self, small_dataset, array_source):
        X, initial_centroids = small_dataset
        engine = ParallelClusterEngine(2, 2, mp=MultiprocessingConfig(n_processes=2))

        _run(engine, initial_centroids, array_source(X), passes=1)
        assert engine._pool is not None
        engine.close()

        assert engine._pool is None

    @pytest.mark.parametrize("kwargs", [{"n_processes": 0}, {"chunk_size": 0}])
    def test_invalid_config(self, kwargs):
        with pytest.raises(ConfigurationError):
            MultiprocessingConfig(**kwargs)


class TestPoolReuse:
    """Пул и shared X привязаны к конкретному массиву источника."""

    def test_fresh_source_each_pass(self, array_source):
        initial = np.array([[0.0], [100.0]])
        sequential = ClusterEngine(2, 1)
        sequential.initialize(SequenceSampleSource(initial))

        with ParallelClusterEngine(2, 1, mp=MultiprocessingConfig(n_processes=2)) as engine:
            engine.initialize(SequenceSampleSource(initial))
            for trial in range(10):
                # Новый источник каждый проход, прежний освобождается
                X = np.arange(4 + trial % 3, dtype=np.float64)[:, None] + 10 * trial
                source = array_source(X)

                consumed = engine.iterate(source)
                sequential.iterate(source)

                assert consumed == X.shape[0]
                assert engine.member_counts.sum() == X.shape[0]
                np.testing.assert_array_equal(
                    engine.member_counts, sequential.member_counts
                )
                np.testing.assert_allclose(
                    engine.centroids, sequential.centroids, rtol=1e-12, atol=1e-12
                )
                del source, X

    def test_pool_kept_for_same_source_only(self, small_dataset, array_source):
        X, initial_centroids = small_dataset
        first = array_source(X)
        second = array_source(X.copy())

        with ParallelClusterEngine(2, 2, mp=MultiprocessingConfig(n_processes=2)) as engine:
            engine.initialize(SequenceSampleSource(initial_centroids))
            engine.iterate(first)
            pool = engine._pool

            engine.iterate(first)
            assert engine._pool is pool

            engine.iterate(second)
            assert engine._pool is not pool

    def test_wrong_dimension_source(self, array_source):
        with ParallelClusterEngine(2, 2, mp=MultiprocessingConfig(n_processes=2)) as engine:
            engine.initialize(SequenceSampleSource([[0.0, 0.0], [1.0, 1.0]]))

            with pytest.raises(DimensionMismatchError):
                engine.iterate(array_source(np.zeros((4, 3))))
            assert engine._pool is None
