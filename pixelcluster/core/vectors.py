"""
Векторные утилиты: приведение образцов к форме (n, D), расстояния
до центроидов и накопление сумм по кластерам.

Общие для последовательного и многопроцессного прохода.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import DimensionMismatchError


def as_block(values: np.ndarray, dimension_count: int) -> np.ndarray:
    """
    Приводит один вектор (D,) или блок (n, D) к float64-массиву (n, D).

    Raises:
        DimensionMismatchError: если форма не согласуется с dimension_count
    """
    block = np.asarray(values, dtype=np.float64)
    if block.ndim == 1:
        block = block[None, :]
    if block.ndim != 2 or block.shape[1] != dimension_count:
        raise DimensionMismatchError(
            f"Expected samples with {dimension_count} dimensions, "
            f"got shape {np.shape(values)}"
        )
    return block


def as_vector(values: np.ndarray, dimension_count: int) -> np.ndarray:
    """Копия одного вектора признаков формы (D,)."""
    vector = np.array(values, dtype=np.float64)
    if vector.shape != (dimension_count,):
        raise DimensionMismatchError(
            f"Expected a vector of {dimension_count} dimensions, "
            f"got shape {vector.shape}"
        )
    return vector


def squared_distances(block: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Квадраты евклидовых расстояний (n, K) без извлечения корня."""
    # (n, K, D) → (n, K)
    diff = block[:, None, :] - centroids[None, :, :]
    return np.einsum("nkd,nkd->nk", diff, diff)


def nearest(block: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Индекс ближайшего центроида для каждой строки блока.

    np.argmin возвращает первый минимум, поэтому при равенстве расстояний
    выигрывает кластер с меньшим индексом.
    """
    return np.argmin(squared_distances(block, centroids), axis=1)


def accumulate_block(
    block: np.ndarray, centroids: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Частичная редукция для блока: (sums[K, D], counts[K]).

    Назначение выполняется по переданным (неизменным в течение прохода)
    центроидам.
    """
    K, D = centroids.shape
    sums = np.zeros((K, D), dtype=np.float64)
    if block.shape[0] == 0:
        return sums, np.zeros(K, dtype=np.int64)

    labels = nearest(block, centroids)
    np.add.at(sums, labels, block)
    counts = np.bincount(labels, minlength=K).astype(np.int64, copy=False)
    return sums, counts


def mean_update(
    centroids: np.ndarray, sums: np.ndarray, counts: np.ndarray
) -> np.ndarray:
    """
    Новые центроиды: sums / counts для непустых кластеров.

    Пустые кластеры сохраняют прежний центроид без изменений.
    """
    new_centroids = centroids.copy()
    non_empty = counts > 0
    new_centroids[non_empty] = sums[non_empty] / counts[non_empty, None]
    return new_centroids
