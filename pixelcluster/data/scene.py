"""
Сцена: стек спектральных каналов (bands, rows, cols) как набор образцов.

Каждый пиксель задаёт вектор признаков длины bands. Пиксели вне ROI, с
no-data значением или с NaN/inf хотя бы в одном канале в кластеризации
не участвуют и получают метку -1 при разметке.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from pixelcluster.core.clusters import ClusterSet
from pixelcluster.core.errors import ConfigurationError, DimensionMismatchError

from .sources import DEFAULT_BLOCK_SIZE, ArraySampleSource, RandomPixelSampler
from .validation import valid_rows

NO_LABEL = -1


class Scene:
    """
    Представление многоканальной сцены для кластеризации.

    Args:
        bands: Массив (bands, rows, cols)
        no_data: Значение «нет данных» (None: не используется)
        roi_mask: Булева маска (rows, cols); False исключает пиксель
    """

    def __init__(
        self,
        bands: np.ndarray,
        no_data: float | None = None,
        roi_mask: np.ndarray | None = None,
    ) -> None:
        stack = np.asarray(bands, dtype=np.float64)
        if stack.ndim != 3:
            raise DimensionMismatchError(
                f"Expected a band stack (bands, rows, cols), got shape {stack.shape}"
            )
        self.band_count, self.rows, self.cols = stack.shape
        self.no_data = no_data

        # (bands, rows, cols) → (rows*cols, bands)
        self.samples = stack.reshape(self.band_count, -1).T

        mask = np.ones(self.rows * self.cols, dtype=bool)
        if roi_mask is not None:
            roi = np.asarray(roi_mask, dtype=bool)
            if roi.shape != (self.rows, self.cols):
                raise DimensionMismatchError(
                    f"ROI mask shape {roi.shape} does not match scene "
                    f"({self.rows}, {self.cols})"
                )
            mask &= roi.reshape(-1)
        if no_data is not None:
            mask &= ~np.any(self.samples == no_data, axis=1)
        self.valid_mask = valid_rows(self.samples, mask)

    @classmethod
    def from_samples(cls, samples: np.ndarray) -> Scene:
        """Сцена из матрицы (N, D): N пикселей в одну колонку."""
        arr = np.asarray(samples, dtype=np.float64)
        if arr.ndim != 2:
            raise DimensionMismatchError(
                f"Expected a sample matrix (N, D), got shape {arr.shape}"
            )
        return cls(arr.T.reshape(arr.shape[1], arr.shape[0], 1))

    @property
    def pixel_count(self) -> int:
        return self.rows * self.cols

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def sample_source(self, block_size: int = DEFAULT_BLOCK_SIZE) -> ArraySampleSource:
        """Источник полного прохода по валидным пикселям."""
        return ArraySampleSource(
            self.samples, valid_mask=self.valid_mask, block_size=block_size
        )

    def random_sampler(
        self, rng: np.random.Generator | int | None = None
    ) -> RandomPixelSampler:
        """Случайный источник валидных пикселей для инициализации."""
        return RandomPixelSampler(self.samples, rng=rng, valid_mask=self.valid_mask)

    def label_image(
        self, clusters: ClusterSet, block_size: int = DEFAULT_BLOCK_SIZE
    ) -> np.ndarray:
        """
        Разметка сцены: позиция ближайшего кластера в ClusterSet
        для каждого валидного пикселя, NO_LABEL для остальных.
        """
        labels = np.full(self.pixel_count, NO_LABEL, dtype=np.int32)
        valid_idx = np.flatnonzero(self.valid_mask)
        for start in range(0, valid_idx.size, block_size):
            idx = valid_idx[start : start + block_size]
            labels[idx] = clusters.assign(self.samples[idx])
        return labels.reshape(self.rows, self.cols)


def load_scene(
    path: str | Path,
    no_data: float | None = None,
    key: str = "bands",
) -> Scene:
    """
    Загружает сцену из .npy или .npz.

    - .npy: массив (bands, rows, cols) или матрица образцов (N, D);
    - .npz: массив по ключу ``key`` (или первый в архиве, кроме roi_mask) и опциональная
      маска ``roi_mask``.
    """
    path = Path(path)
    logging.getLogger("pixelcluster").info(f"Loading scene from {path}")

    roi_mask = None
    if path.suffix == ".npz":
        with np.load(path) as archive:
            if key in archive.files:
                name = key
            else:
                candidates = [f for f in archive.files if f != "roi_mask"]
                if not candidates:
                    raise ConfigurationError(f"No band data in {path}")
                name = candidates[0]
            data = archive[name]
            if "roi_mask" in archive.files:
                roi_mask = archive["roi_mask"]
    else:
        data = np.load(path)

    if data.ndim == 2:
        data = data.T.reshape(data.shape[1], data.shape[0], 1)
        if roi_mask is not None:
            roi_mask = np.reshape(roi_mask, (-1, 1))
    scene = Scene(data, no_data=no_data, roi_mask=roi_mask)

    logging.getLogger("pixelcluster").info(
        f"Scene loaded: bands={scene.band_count}, rows={scene.rows}, "
        f"cols={scene.cols}, valid={scene.valid_count}"
    )
    return scene
