"""Протоколы источников образцов, с которыми работает движок."""

from __future__ import annotations

from typing import Iterator, Protocol

import numpy as np


class RandomSampleSource(Protocol):
    """
    Источник случайных векторов для инициализации центроидов.

    Повторы допускаются: отбраковкой дубликатов занимается движок.
    """

    def next_value(self) -> np.ndarray:
        ...


class PassSampleSource(Protocol):
    """
    Источник полного прохода: каждая итерация выдаёт все валидные образцы
    ровно один раз, по одному вектору (D,) или блоками (n, D).
    """

    def __iter__(self) -> Iterator[np.ndarray]:
        ...
