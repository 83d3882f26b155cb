"""
Метрики запуска кластеризации.

- centroid_shift: максимальное покомпонентное смещение центроидов между
  проходами (вход для политики остановки вызывающей стороны);
- within_cluster_sse: сумма квадратов расстояний образцов до ближайших
  центроидов;
- throughput: пропускная способность прохода.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from pixelcluster.core.vectors import squared_distances


def centroid_shift(old_centroids: np.ndarray, new_centroids: np.ndarray) -> float:
    """
    Максимальное абсолютное изменение координаты центроида.

    Args:
        old_centroids: Центроиды до прохода, (K, D)
        new_centroids: Центроиды после прохода, (K, D)

    Raises:
        ValueError: Если формы массивов различаются
    """
    old = np.asarray(old_centroids, dtype=np.float64)
    new = np.asarray(new_centroids, dtype=np.float64)
    if old.shape != new.shape:
        raise ValueError(
            f"Centroid shapes differ: {old.shape} vs {new.shape}"
        )
    if old.size == 0:
        return 0.0
    return float(np.max(np.abs(new - old)))


def within_cluster_sse(samples: Iterable[np.ndarray], centroids: np.ndarray) -> float:
    """
    Сумма квадратов евклидовых расстояний до ближайшего центроида.

    Args:
        samples: Векторы (D,) или блоки (n, D), например ArraySampleSource
        centroids: Центроиды (K, D)
    """
    centroids = np.asarray(centroids, dtype=np.float64)
    total = 0.0
    for item in samples:
        block = np.atleast_2d(np.asarray(item, dtype=np.float64))
        distances = squared_distances(block, centroids)
        total += float(np.sum(np.min(distances, axis=1)))
    return total


def throughput(
    N: int, K: int, D: int, n_passes: int, total_time: float
) -> float:
    """
    Пропускная способность: (N × K × D × n_passes) / total_time.

    Raises:
        ZeroDivisionError: Если total_time равно нулю
    """
    if total_time == 0:
        raise ZeroDivisionError("Total time cannot be zero")
    return (N * K * D * n_passes) / total_time
