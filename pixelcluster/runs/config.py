from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pixelcluster.core.engine import DEFAULT_MAX_SEED_ATTEMPTS
from pixelcluster.core.errors import ConfigurationError
from pixelcluster.data.sources import DEFAULT_BLOCK_SIZE


class StoppingRule(str, Enum):
    # Политика остановки принадлежит вызывающей стороне, не движку
    FIXED_PASSES = "fixed_passes"
    CENTROID_SHIFT = "centroid_shift"


@dataclass(frozen=True)
class RunConfig:
    """Параметры одного запуска кластеризации."""

    cluster_count: int
    max_passes: int = 100
    stopping: StoppingRule = StoppingRule.FIXED_PASSES
    tol: float = 1e-6  # Порог смещения центроидов для CENTROID_SHIFT
    seed: Optional[int] = None
    max_seed_attempts: int = DEFAULT_MAX_SEED_ATTEMPTS
    n_processes: int = 1
    chunk_size: Optional[int] = None
    block_size: int = DEFAULT_BLOCK_SIZE

    def validate(self) -> RunConfig:
        if self.cluster_count <= 0:
            raise ConfigurationError("cluster_count must be positive")
        if self.max_passes <= 0:
            raise ConfigurationError("max_passes must be positive")
        if self.tol < 0:
            raise ConfigurationError("tol must be non-negative")
        if self.max_seed_attempts <= 0:
            raise ConfigurationError("max_seed_attempts must be positive")
        if self.n_processes <= 0:
            raise ConfigurationError("n_processes must be positive")
        if self.chunk_size is not None and self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive")
        if self.block_size <= 0:
            raise ConfigurationError("block_size must be positive")
        try:
            StoppingRule(self.stopping)
        except ValueError as e:
            raise ConfigurationError(f"Unknown stopping rule: {self.stopping!r}") from e
        return self

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["stopping"] = StoppingRule(self.stopping).value
        return d
