"""
Генератор синтетических многоканальных сцен для демонстраций и тестов.

Использует sklearn.make_blobs: каждый «класс покрытия» представлен облаком точек в
пространстве каналов, пиксели раскладываются по растру (rows, cols).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.datasets import make_blobs

from pixelcluster.core.errors import ConfigurationError

from .scene import Scene


@dataclass
class SyntheticScene:
    """Контейнер для сгенерированной сцены."""

    scene: Scene
    labels: np.ndarray  # (rows, cols), истинный класс пикселя
    centers: np.ndarray  # (K, bands)


def generate_scene(
    rows: int = 64,
    cols: int = 64,
    bands: int = 4,
    classes: int = 3,
    cluster_std: float = 0.05,
    center_box: tuple[float, float] = (0.0, 1.0),
    no_data_fraction: float = 0.0,
    no_data: float = -9999.0,
    seed: int = 42,
) -> SyntheticScene:
    """
    Генерация синтетической сцены с помощью make_blobs.

    Args:
        rows: Число строк растра
        cols: Число столбцов растра
        bands: Число спектральных каналов (D)
        classes: Число классов покрытия (K)
        cluster_std: Разброс значений внутри класса
        center_box: Диапазон расположения центров классов (отражательная способность)
        no_data_fraction: Доля пикселей, заменяемых на no_data во всех каналах
        no_data: Значение «нет данных»
        seed: Seed для воспроизводимости

    Returns:
        SyntheticScene со сценой, истинными метками и центрами классов
    """
    if rows <= 0 or cols <= 0 or bands <= 0 or classes <= 0:
        raise ConfigurationError("rows, cols, bands and classes must be positive")
    if not 0.0 <= no_data_fraction < 1.0:
        raise ConfigurationError("no_data_fraction must be in [0, 1)")

    data, labels, centers = make_blobs(
        n_samples=rows * cols,
        n_features=bands,
        centers=classes,
        cluster_std=cluster_std,
        center_box=center_box,
        random_state=seed,
        return_centers=True,
    )

    labels = labels.astype(np.int32)
    if no_data_fraction > 0.0:
        rng = np.random.default_rng(seed)
        holes = rng.random(rows * cols) < no_data_fraction
        data[holes] = no_data
        labels[holes] = -1

    # (N, bands) → (bands, rows, cols)
    stack = data.T.reshape(bands, rows, cols)
    scene = Scene(stack, no_data=no_data if no_data_fraction > 0.0 else None)

    return SyntheticScene(
        scene=scene,
        labels=labels.reshape(rows, cols),
        centers=np.asarray(centers, dtype=np.float64),
    )
