"""
Проверка и фильтрация образцов перед подачей в движок.

Движок не получает некорректных векторов: строки с NaN/inf и строки,
исключённые маской, отбрасываются здесь.
"""

from __future__ import annotations

import numpy as np

from pixelcluster.core.errors import DimensionMismatchError


def validate_samples(samples: np.ndarray, dimension_count: int | None = None) -> np.ndarray:
    """
    Приводит матрицу образцов к float64 (N, D) и проверяет размерность.

    Args:
        samples: Матрица образцов (N, D)
        dimension_count: Ожидаемое D (None: не проверять)

    Raises:
        DimensionMismatchError: Если форма не (N, D) или D не совпадает
    """
    arr = np.asarray(samples, dtype=np.float64)
    if arr.ndim != 2:
        raise DimensionMismatchError(
            f"Expected a 2-D sample matrix (N, D), got shape {arr.shape}"
        )
    if arr.shape[1] == 0:
        raise DimensionMismatchError("Samples must have at least one dimension")
    if dimension_count is not None and arr.shape[1] != dimension_count:
        raise DimensionMismatchError(
            f"Expected {dimension_count} dimensions, got {arr.shape[1]}"
        )
    return arr


def valid_rows(samples: np.ndarray, valid_mask: np.ndarray | None = None) -> np.ndarray:
    """
    Булева маска строк, пригодных для кластеризации.

    Строка валидна, если все её значения конечны и (при наличии маски)
    соответствующий элемент valid_mask равен True.
    """
    arr = validate_samples(samples)
    mask = np.all(np.isfinite(arr), axis=1)
    if valid_mask is not None:
        valid_mask = np.asarray(valid_mask, dtype=bool).reshape(-1)
        if valid_mask.shape[0] != arr.shape[0]:
            raise DimensionMismatchError(
                f"Mask has {valid_mask.shape[0]} entries for {arr.shape[0]} samples"
            )
        mask &= valid_mask
    return mask
