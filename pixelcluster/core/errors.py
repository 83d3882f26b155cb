"""
Иерархия исключений движка кластеризации.

Ошибки конфигурации и неверного порядка вызовов относятся к вызывающей
стороне; ошибки источника данных не оборачиваются и пробрасываются как есть.
"""

from __future__ import annotations


class ClusteringError(Exception):
    """Базовое исключение пакета pixelcluster."""


class ConfigurationError(ClusteringError, ValueError):
    """Некорректные параметры движка или запуска (K <= 0, D <= 0 и т.п.)."""


class InvalidStateError(ClusteringError, RuntimeError):
    """Нарушен жизненный цикл: iterate/get_clusters до initialize и т.п."""


class DimensionMismatchError(ClusteringError, ValueError):
    """Размерность образца не совпадает с dimension_count движка."""


class SamplingExhaustedError(ClusteringError):
    """
    Источник не смог выдать достаточно попарно различных векторов
    за отведённое число попыток при инициализации центроидов.
    """

    def __init__(self, cluster_index: int, attempts: int, cluster_count: int) -> None:
        super().__init__(
            f"Could not draw a distinct seed for cluster {cluster_index} "
            f"of {cluster_count} after {attempts} attempts"
        )
        self.cluster_index = cluster_index
        self.attempts = attempts
        self.cluster_count = cluster_count
