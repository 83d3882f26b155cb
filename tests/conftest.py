"""
Общие фикстуры для всех тестов.
"""

import numpy as np
import pytest

from pixelcluster.data.sources import ArraySampleSource, SequenceSampleSource


class ListSource:
    """Источник полного прохода по списку векторов (по одному за раз)."""

    def __init__(self, vectors):
        self.vectors = [np.asarray(v, dtype=np.float64) for v in vectors]
        self.iterations = 0

    def __iter__(self):
        self.iterations += 1
        return iter(self.vectors)


class FailingSource:
    """Источник, падающий после выдачи fail_after векторов."""

    def __init__(self, vectors, fail_after):
        self.vectors = [np.asarray(v, dtype=np.float64) for v in vectors]
        self.fail_after = fail_after

    def __iter__(self):
        for i, v in enumerate(self.vectors):
            if i == self.fail_after:
                raise IOError("band read failed")
            yield v


@pytest.fixture
def rng():
    """Явный генератор с фиксированным seed."""
    return np.random.default_rng(42)


@pytest.fixture
def seeds():
    """Фабрика случайного источника с заданными затравками."""
    return SequenceSampleSource


@pytest.fixture
def list_source():
    return ListSource


@pytest.fixture
def failing_source():
    return FailingSource


@pytest.fixture
def small_dataset():
    """Небольшой датасет: 2 канала, 2 явно разделённых кластера."""
    gen = np.random.default_rng(42)
    cluster1 = gen.normal(size=(30, 2)) + [0, 0]
    cluster2 = gen.normal(size=(30, 2)) + [5, 5]
    X = np.vstack([cluster1, cluster2])
    initial_centroids = np.array([
        [-1.0, -1.0],
        [6.0, 6.0],
    ])
    return X, initial_centroids


@pytest.fixture
def medium_dataset():
    """Средний датасет: 10 каналов, 3 кластера."""
    gen = np.random.default_rng(42)
    cluster1 = gen.normal(size=(50, 10)) + [0] * 10
    cluster2 = gen.normal(size=(50, 10)) + [5] * 10
    cluster3 = gen.normal(size=(50, 10)) + [-5] * 10
    X = np.vstack([cluster1, cluster2, cluster3])
    initial_centroids = np.array([
        [-1.0] * 10,
        [6.0] * 10,
        [-6.0] * 10,
    ])
    return X, initial_centroids


@pytest.fixture
def simple_2d_dataset():
    """Очень простой 2D датасет для базовых тестов."""
    X = np.array([
        [0.0, 0.0],
        [1.0, 1.0],
        [2.0, 2.0],
        [10.0, 10.0],
        [11.0, 11.0],
        [12.0, 12.0],
    ])
    initial_centroids = np.array([
        [0.5, 0.5],
        [11.0, 11.0],
    ])
    return X, initial_centroids


@pytest.fixture
def array_source():
    """Фабрика ArraySampleSource с маленьким блоком (несколько блоков за проход)."""

    def make(X, block_size=4, valid_mask=None):
        return ArraySampleSource(X, valid_mask=valid_mask, block_size=block_size)

    return make
