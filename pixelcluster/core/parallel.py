from __future__ import annotations

from dataclasses import dataclass
from multiprocessing import Pool, RawArray, cpu_count
from typing import Any, List, Optional, Tuple

import numpy as np

from .engine import DEFAULT_MAX_SEED_ATTEMPTS, ClusterEngine
from .errors import ConfigurationError, DimensionMismatchError
from .protocols import PassSampleSource
from .vectors import accumulate_block


@dataclass(frozen=True)
class MultiprocessingConfig:
    """Параметры многопроцессного прохода."""

    n_processes: int = 4
    chunk_size: Optional[int] = None

    def __post_init__(self) -> None:
        if self.n_processes <= 0:
            raise ConfigurationError("n_processes must be positive")
        if self.chunk_size is not None and self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive")


# --- Глобальное состояние: shared X в воркерах ---
_SHARED_X_BUF: RawArray | None = None
_SHARED_X_SHAPE: Tuple[int, int] | None = None


def _init_shared_X(raw: RawArray, shape: Tuple[int, int]) -> None:
    """Инициализатор пула: регистрирует shared X."""
    global _SHARED_X_BUF, _SHARED_X_SHAPE
    _SHARED_X_BUF = raw
    _SHARED_X_SHAPE = shape


def _get_shared_X() -> np.ndarray:
    assert _SHARED_X_BUF is not None and _SHARED_X_SHAPE is not None
    arr = np.frombuffer(_SHARED_X_BUF, dtype=np.float64)
    return arr.reshape(_SHARED_X_SHAPE)


def _partial_pass_worker(
    args: Tuple[np.ndarray, np.ndarray]
) -> Tuple[np.ndarray, np.ndarray]:
    """Частичная редукция раздела: (sums[K,D], counts[K]) по центроидам прохода."""
    idx, centroids = args
    X = _get_shared_X()
    return accumulate_block(X[idx], centroids)


class ParallelClusterEngine(ClusterEngine):
    """
    ClusterEngine с разбиением прохода по процессам.

    Каждый раздел независимо копит суммы и счётчики по одним и тем же
    центроидам начала прохода; родитель складывает частичные результаты и
    один раз делит на счётчики. Работает для источников с массивом образцов
    (атрибут ``samples`` формы (N, D)); прочие источники сканируются
    последовательно.

    Пул создаётся лениво и переиспользуется между проходами по тому же
    массиву; закрывается через close() или выход из контекстного менеджера.
    """

    def __init__(
        self,
        cluster_count: int,
        dimension_count: int,
        mp: MultiprocessingConfig = MultiprocessingConfig(),
        max_seed_attempts: int = DEFAULT_MAX_SEED_ATTEMPTS,
        logger: Any | None = None,
    ) -> None:
        super().__init__(
            cluster_count,
            dimension_count,
            max_seed_attempts=max_seed_attempts,
            logger=logger,
        )
        self.mp = mp

        self._pool: Optional[Pool] = None
        self._chunks: Optional[List[np.ndarray]] = None
        self._pool_X: Optional[np.ndarray] = None

    def __enter__(self) -> ParallelClusterEngine:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # --- Пул и разбиение ---

    def _make_chunks(self, N: int, n_procs: int) -> List[np.ndarray]:
        """Разбиение индексов на разделы."""
        if self.mp.chunk_size is None:
            chunks = np.array_split(np.arange(N), n_procs)
        else:
            cs = int(self.mp.chunk_size)
            chunks = [np.arange(i, min(i + cs, N)) for i in range(0, N, cs)]
        return [idx for idx in chunks if idx.size > 0]

    def _ensure_pool_and_chunks(self, X: np.ndarray) -> None:
        """
        Ленивая инициализация пула, shared X и разделов.

        Пул переиспользуется только для того же объекта X; ссылка на него
        хранится до close().
        """
        if self._pool is not None and X is self._pool_X:
            return
        self.close()

        n_procs = max(1, min(int(self.mp.n_processes), cpu_count()))
        self._chunks = self._make_chunks(X.shape[0], n_procs)

        # Копируем X один раз в shared RawArray (float64)
        X_c = np.ascontiguousarray(X, dtype=np.float64)
        raw = RawArray("d", int(X_c.size))
        shared_view = np.frombuffer(raw, dtype=np.float64).reshape(X_c.shape)
        shared_view[:] = X_c

        self._pool = Pool(
            processes=n_procs,
            initializer=_init_shared_X,
            initargs=(raw, X_c.shape),
        )
        self._pool_X = X

        if self.logger:
            self.logger.info(
                f"Started pool: processes={n_procs}, partitions={len(self._chunks)}"
            )

    def close(self) -> None:
        """Закрыть пул воркеров."""
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
        self._pool = None
        self._chunks = None
        self._pool_X = None

    # ---------- Pass (parallel reduction) ----------

    def _scan(self, samples: PassSampleSource) -> Tuple[np.ndarray, np.ndarray]:
        X = getattr(samples, "samples", None)
        if not isinstance(X, np.ndarray):
            return super()._scan(samples)
        if X.ndim != 2 or X.shape[1] != self.dimension_count:
            raise DimensionMismatchError(
                f"Expected samples with {self.dimension_count} dimensions, "
                f"got shape {X.shape}"
            )
        if X.shape[0] == 0:
            return super()._scan(samples)

        # Ключ пула: сам массив источника, без промежуточной копии
        self._ensure_pool_and_chunks(X)
        assert self._pool is not None and self._chunks is not None

        centroids = self._centroids
        args: List[Tuple[np.ndarray, np.ndarray]] = [
            (idx, centroids) for idx in self._chunks
        ]
        partials: List[Tuple[np.ndarray, np.ndarray]] = self._pool.map(
            _partial_pass_worker, args
        )

        sums_total = np.zeros_like(centroids)
        counts_total = np.zeros(self.cluster_count, dtype=np.int64)
        for sums, counts in partials:
            sums_total += sums
            counts_total += counts

        return sums_total, counts_total
