"""
Неизменяемые результаты кластеризации: Cluster и ClusterSet.

Оба объекта являются снимками состояния движка: центроиды копируются и
помечаются как read-only, последующие проходы их не затрагивают.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Iterable, Iterator, overload

import numpy as np

from .vectors import as_block, nearest


def _frozen_copy(values: np.ndarray) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Cluster:
    """
    Кластер: снимок центроида и числа его членов.

    index: номер кластера в движке на момент извлечения.
    """

    centroid: np.ndarray
    member_count: int
    index: int = field(default=0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "centroid", _frozen_copy(self.centroid))
        object.__setattr__(self, "member_count", int(self.member_count))
        object.__setattr__(self, "index", int(self.index))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cluster):
            return NotImplemented
        return (
            self.index == other.index
            and self.member_count == other.member_count
            and np.array_equal(self.centroid, other.centroid)
        )

    def __hash__(self) -> int:
        return hash((self.index, self.member_count, self.centroid.tobytes()))


class ClusterSet(Sequence):
    """
    Упорядоченный по возрастанию member_count набор кластеров.

    Сортировка стабильная: кластеры с одинаковым числом членов сохраняют
    исходный порядок индексов. Позиция в наборе используется как метка
    класса при разметке образцов (nearest/assign).
    """

    def __init__(self, clusters: Iterable[Cluster]) -> None:
        # sorted() стабилен
        self._clusters: tuple[Cluster, ...] = tuple(
            sorted(clusters, key=lambda c: c.member_count)
        )
        if self._clusters:
            means = np.vstack([c.centroid for c in self._clusters])
        else:
            means = np.empty((0, 0), dtype=np.float64)
        means.setflags(write=False)
        self._means = means

    @overload
    def __getitem__(self, i: int) -> Cluster:
        ...

    @overload
    def __getitem__(self, i: slice) -> tuple[Cluster, ...]:
        ...

    def __getitem__(self, i):
        return self._clusters[i]

    def __len__(self) -> int:
        return len(self._clusters)

    def __iter__(self) -> Iterator[Cluster]:
        return iter(self._clusters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClusterSet):
            return NotImplemented
        return self._clusters == other._clusters

    def __hash__(self) -> int:
        return hash(self._clusters)

    def __repr__(self) -> str:
        counts = ", ".join(str(c.member_count) for c in self._clusters)
        return f"ClusterSet(k={len(self)}, member_counts=[{counts}])"

    @property
    def means(self) -> np.ndarray:
        """Центроиды (k, D) в порядке набора (только чтение)."""
        return self._means

    @property
    def member_counts(self) -> np.ndarray:
        return np.array([c.member_count for c in self._clusters], dtype=np.int64)

    @property
    def indices(self) -> np.ndarray:
        """Исходные индексы кластеров в движке."""
        return np.array([c.index for c in self._clusters], dtype=np.int64)

    def assign(self, samples: np.ndarray) -> np.ndarray:
        """
        Позиции ближайших кластеров для вектора (D,) или блока (n, D).

        При равенстве расстояний выбирается меньшая позиция в наборе.
        """
        block = as_block(samples, self._means.shape[1])
        return nearest(block, self._means)

    def nearest(self, point: np.ndarray) -> int:
        """Позиция ближайшего кластера для одного вектора."""
        return int(self.assign(point)[0])

    def to_dict(self) -> dict:
        return {
            "clusters": [
                {
                    "index": c.index,
                    "member_count": c.member_count,
                    "centroid": c.centroid.tolist(),
                }
                for c in self._clusters
            ]
        }
