from __future__ import annotations

from typing import Any, List, Tuple

import numpy as np

from pixelcluster.metrics.timers import Timer

from .clusters import Cluster, ClusterSet
from .errors import (
    ConfigurationError,
    InvalidStateError,
    SamplingExhaustedError,
)
from .protocols import PassSampleSource, RandomSampleSource
from .vectors import accumulate_block, as_block, as_vector, mean_update

DEFAULT_MAX_SEED_ATTEMPTS = 1000


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return int(value)


class ClusterEngine:
    """
    Пакетный K-means (алгоритм Ллойда) над потоком векторов признаков.

    Движок владеет центроидами и счётчиками членов кластеров:
    - initialize: выбор K попарно различных затравок из случайного источника;
    - iterate: один полный проход E/M по источнику всех валидных образцов;
    - get_clusters: снимок кластеров, упорядоченный по числу членов.

    Критерий остановки движок не вычисляет: число проходов и условие выхода
    определяет вызывающая сторона (см. pixelcluster.runs.runner).
    """

    def __init__(
        self,
        cluster_count: int,
        dimension_count: int,
        max_seed_attempts: int = DEFAULT_MAX_SEED_ATTEMPTS,
        logger: Any | None = None,
    ) -> None:
        self.cluster_count = _positive_int("cluster_count", cluster_count)
        self.dimension_count = _positive_int("dimension_count", dimension_count)
        self.max_seed_attempts = _positive_int("max_seed_attempts", max_seed_attempts)
        self.logger = logger

        self._centroids = np.zeros(
            (self.cluster_count, self.dimension_count), dtype=np.float64
        )
        self._member_counts = np.zeros(self.cluster_count, dtype=np.int64)
        self._initialized = False

        self.pass_count: int = 0
        self.last_pass_seconds: float = 0.0

    # --- Состояние (только копии наружу) ---

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def centroids(self) -> np.ndarray:
        """Копия текущих центроидов (K, D)."""
        return self._centroids.copy()

    @property
    def member_counts(self) -> np.ndarray:
        """Копия счётчиков членов по кластерам."""
        return self._member_counts.copy()

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise InvalidStateError(f"{operation}() called before initialize()")

    # ---------- Initialization ----------

    def initialize(self, source: RandomSampleSource) -> None:
        """
        Выбирает K попарно различных центроидов из случайного источника.

        Для каждого индекса кластера вектор тянется из источника до тех пор,
        пока он не окажется отличным (покомпонентно) от всех уже принятых.
        Число попыток на один центроид ограничено max_seed_attempts.

        Raises:
            InvalidStateError: при повторном вызове
            SamplingExhaustedError: если источник исчерпал бюджет попыток
            DimensionMismatchError: если источник выдал вектор не той формы
        """
        if self._initialized:
            raise InvalidStateError("initialize() may only be called once")

        accepted: List[np.ndarray] = []
        total_draws = 0
        for c in range(self.cluster_count):
            for _ in range(self.max_seed_attempts):
                candidate = as_vector(source.next_value(), self.dimension_count)
                total_draws += 1
                if not any(np.array_equal(candidate, prev) for prev in accepted):
                    accepted.append(candidate)
                    break
            else:
                raise SamplingExhaustedError(
                    cluster_index=c,
                    attempts=self.max_seed_attempts,
                    cluster_count=self.cluster_count,
                )

        # Коммит только после успешного выбора всех затравок
        self._centroids = np.vstack(accepted)
        self._member_counts[:] = 0
        self._initialized = True

        if self.logger:
            self.logger.info(
                f"Initialized {self.cluster_count} centroids "
                f"(D={self.dimension_count}, draws={total_draws})"
            )

    # ---------- One EM pass ----------

    def _scan(self, samples: PassSampleSource) -> Tuple[np.ndarray, np.ndarray]:
        """Накопление (sums, counts) за проход по центроидам начала прохода."""
        centroids = self._centroids
        sums = np.zeros_like(centroids)
        counts = np.zeros(self.cluster_count, dtype=np.int64)

        for item in samples:
            block = as_block(item, self.dimension_count)
            block_sums, block_counts = accumulate_block(block, centroids)
            sums += block_sums
            counts += block_counts

        return sums, counts

    def _commit(self, sums: np.ndarray, counts: np.ndarray) -> int:
        """Деление на счётчики и фиксация нового состояния."""
        self._centroids = mean_update(self._centroids, sums, counts)
        self._member_counts = counts
        self.pass_count += 1
        return int(counts.sum())

    def iterate(self, samples: PassSampleSource) -> int:
        """
        Выполняет один пакетный проход E/M.

        Все образцы назначаются по центроидам, зафиксированным в начале
        прохода; центроиды пересчитываются один раз после полного прохода.
        Кластеры без членов сохраняют прежний центроид.

        Ошибка источника прерывает проход без частичного обновления:
        центроиды и счётчики остаются такими же, как до вызова.

        :return: число образцов, обработанных за проход
        """
        self._require_initialized("iterate")

        with Timer() as t_pass:
            sums, counts = self._scan(samples)
            consumed = self._commit(sums, counts)
        self.last_pass_seconds = t_pass.elapsed

        if self.logger:
            self.logger.debug(
                f"Pass {self.pass_count}: samples={consumed}, "
                f"empty_clusters={int(np.sum(counts == 0))}, "
                f"T_pass={self.last_pass_seconds:.6f}s"
            )
        return consumed

    # ---------- Extraction ----------

    def get_clusters(self) -> ClusterSet:
        """Снимок кластеров, отсортированный по возрастанию числа членов."""
        self._require_initialized("get_clusters")
        return ClusterSet(
            Cluster(self._centroids[c], self._member_counts[c], index=c)
            for c in range(self.cluster_count)
        )
