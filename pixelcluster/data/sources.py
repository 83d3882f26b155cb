"""
Источники образцов поверх матрицы в памяти.

- ArraySampleSource: полный проход по всем валидным строкам (для iterate);
- RandomPixelSampler: случайная валидная строка на каждый вызов (для
  initialize), случайность задаётся явным numpy.random.Generator;
- SequenceSampleSource: циклическое воспроизведение заданных векторов
  (явные затравки, детерминированные запуски).
"""

from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np

from pixelcluster.core.errors import ConfigurationError

from .validation import valid_rows, validate_samples

DEFAULT_BLOCK_SIZE = 65_536


class ArraySampleSource:
    """
    Источник полного прохода по матрице образцов (N, D).

    Невалидные строки (NaN/inf, исключённые маской) отбрасываются один раз
    при создании. Каждая итерация выдаёт блоки (n, D) в одном и том же
    порядке строк.
    """

    def __init__(
        self,
        samples: np.ndarray,
        valid_mask: np.ndarray | None = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        if block_size <= 0:
            raise ConfigurationError("block_size must be positive")
        arr = validate_samples(samples)
        self.block_size = int(block_size)
        self.row_mask = valid_rows(arr, valid_mask)
        self._samples = np.ascontiguousarray(arr[self.row_mask])
        self._samples.setflags(write=False)

    @property
    def samples(self) -> np.ndarray:
        """Валидные образцы (N_valid, D), только чтение."""
        return self._samples

    @property
    def dimension_count(self) -> int:
        return int(self._samples.shape[1])

    def __len__(self) -> int:
        return int(self._samples.shape[0])

    def __iter__(self) -> Iterator[np.ndarray]:
        for start in range(0, len(self), self.block_size):
            yield self._samples[start : start + self.block_size]


class RandomPixelSampler:
    """
    Случайный источник: равномерно выбранная валидная строка на вызов.

    Генератор передаётся явно (или создаётся из seed), глобальное
    состояние numpy.random не используется.
    """

    def __init__(
        self,
        samples: np.ndarray,
        rng: np.random.Generator | int | None = None,
        valid_mask: np.ndarray | None = None,
    ) -> None:
        arr = validate_samples(samples)
        self._samples = arr[valid_rows(arr, valid_mask)]
        if self._samples.shape[0] == 0:
            raise ConfigurationError("No valid samples to draw from")
        if isinstance(rng, np.random.Generator):
            self.rng = rng
        else:
            self.rng = np.random.default_rng(rng)

    def __len__(self) -> int:
        return int(self._samples.shape[0])

    def next_value(self) -> np.ndarray:
        i = int(self.rng.integers(len(self)))
        return self._samples[i].copy()


class SequenceSampleSource:
    """Случайный источник, циклически выдающий заданные векторы по порядку."""

    def __init__(self, vectors: Sequence[Sequence[float]] | np.ndarray) -> None:
        arr = np.asarray(vectors, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr[:, None]
        self._vectors = validate_samples(arr)
        if self._vectors.shape[0] == 0:
            raise ConfigurationError("SequenceSampleSource needs at least one vector")
        self._pos = 0
        self.draws = 0

    def next_value(self) -> np.ndarray:
        value = self._vectors[self._pos].copy()
        self._pos = (self._pos + 1) % self._vectors.shape[0]
        self.draws += 1
        return value
