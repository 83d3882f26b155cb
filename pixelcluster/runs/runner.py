import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from pixelcluster.core.clusters import ClusterSet
from pixelcluster.core.engine import ClusterEngine
from pixelcluster.core.parallel import MultiprocessingConfig, ParallelClusterEngine
from pixelcluster.data.scene import Scene
from pixelcluster.metrics.metrics import centroid_shift, throughput, within_cluster_sse
from pixelcluster.metrics.timers import Timer
from pixelcluster.runs.config import RunConfig, StoppingRule
from pixelcluster.utils.logging import format_run_prefix


class _PrefixedLogger:
    """Обёртка над логгером, добавляющая префикс к каждому сообщению."""

    def __init__(self, base_logger: logging.Logger | None, prefix: str) -> None:
        self._base = base_logger
        self._prefix = prefix

    def __bool__(self) -> bool:
        return self._base is not None

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._base:
            self._base.log(level, f"{self._prefix} {msg}", *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)


@dataclass
class RunResult:
    """Итог запуска: финальный ClusterSet и статистика проходов."""

    clusters: ClusterSet
    passes: int
    converged: bool
    cancelled: bool
    samples: int
    sse: float = 0.0
    shifts: List[float] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passes": self.passes,
            "converged": self.converged,
            "cancelled": self.cancelled,
            "samples": self.samples,
            "sse": self.sse,
            "shifts": list(self.shifts),
            "timings": dict(self.timings),
            **self.clusters.to_dict(),
        }


class ClusteringRunner:
    """
    Запускает кластеризацию сцены: initialize, затем проходы iterate.

    Условие остановки определяется здесь, а не в движке:
    - FIXED_PASSES: ровно max_passes проходов;
    - CENTROID_SHIFT: до max_passes проходов, ранний выход, когда
      максимальное смещение центроидов меньше tol.

    Отмена проверяется только между проходами (проход атомарен).
    """

    def __init__(self, config: RunConfig, logger: logging.Logger | None = None) -> None:
        self.config = config.validate()
        self.logger = logger

    def _create_engine(self, D: int, logger: Any) -> ClusterEngine:
        cfg = self.config
        if cfg.n_processes > 1:
            return ParallelClusterEngine(
                cfg.cluster_count,
                D,
                mp=MultiprocessingConfig(
                    n_processes=cfg.n_processes, chunk_size=cfg.chunk_size
                ),
                max_seed_attempts=cfg.max_seed_attempts,
                logger=logger,
            )
        return ClusterEngine(
            cfg.cluster_count,
            D,
            max_seed_attempts=cfg.max_seed_attempts,
            logger=logger,
        )

    def run(
        self,
        data: Scene | np.ndarray,
        cancel: Optional[Callable[[], bool]] = None,
        name: str | None = None,
    ) -> RunResult:
        """
        Кластеризует сцену или матрицу образцов (N, D).

        :param data: Scene или матрица образцов
        :param cancel: функция без аргументов; True прерывает запуск перед
            очередным проходом
        :param name: имя запуска для префикса логов
        :return: RunResult с ClusterSet после последнего завершённого прохода
        """
        cfg = self.config
        scene = data if isinstance(data, Scene) else Scene.from_samples(data)

        # Явный генератор: запуск воспроизводим при фиксированном seed
        rng = np.random.default_rng(cfg.seed)
        source = scene.sample_source(block_size=cfg.block_size)
        sampler = scene.random_sampler(rng)

        K, D, N = cfg.cluster_count, scene.band_count, len(source)
        prefix = format_run_prefix({"K": K, "D": D, "N": N, "name": name})
        log = _PrefixedLogger(self.logger, prefix)

        engine = self._create_engine(D, log)
        shifts: List[float] = []
        pass_times: List[float] = []
        converged = False
        cancelled = False

        try:
            with Timer() as t_total:
                with Timer() as t_init:
                    engine.initialize(sampler)

                for i in range(cfg.max_passes):
                    if cancel is not None and cancel():
                        cancelled = True
                        log.warning(f"Cancelled before pass {i + 1}/{cfg.max_passes}")
                        break

                    old_centroids = engine.centroids
                    engine.iterate(source)
                    pass_times.append(engine.last_pass_seconds)

                    shift = centroid_shift(old_centroids, engine.centroids)
                    shifts.append(shift)
                    converged = (
                        cfg.stopping == StoppingRule.CENTROID_SHIFT and shift < cfg.tol
                    )

                    if i == 0 or (i + 1) % 10 == 0 or converged or i + 1 == cfg.max_passes:
                        status = " (converged)" if converged else ""
                        log.info(
                            f"Pass {i + 1}/{cfg.max_passes}{status} "
                            f"(T_pass={engine.last_pass_seconds:.6f}s, "
                            f"max_shift={shift:.2e})"
                        )

                    if converged:
                        log.info(
                            f"Centroid shift below tol after {i + 1} passes "
                            f"(max_shift={shift:.2e} < tol={cfg.tol:.2e})"
                        )
                        break

                clusters = engine.get_clusters()
                sse = within_cluster_sse(source, clusters.means)
        finally:
            if isinstance(engine, ParallelClusterEngine):
                engine.close()

        passes = len(pass_times)
        pass_total = float(sum(pass_times))
        timings: Dict[str, float] = {
            "T_init": float(t_init.elapsed),
            "T_pass_total": pass_total,
            "T_pass_avg": pass_total / passes if passes else 0.0,
            "T_total": float(t_total.elapsed),
            "throughput_ops": (
                throughput(N, K, D, passes, pass_total) if pass_total > 0 else 0.0
            ),
        }

        log.info(
            f"Done: passes={passes}, converged={converged}, "
            f"member_counts={clusters.member_counts.tolist()}, sse={sse:.6e}, "
            f"T_total={timings['T_total']:.6f}s"
        )

        return RunResult(
            clusters=clusters,
            passes=passes,
            converged=converged,
            cancelled=cancelled,
            samples=N,
            sse=sse,
            shifts=shifts,
            timings=timings,
        )
