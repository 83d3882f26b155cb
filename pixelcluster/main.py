# main.py
from __future__ import annotations

import argparse
import json
import logging
from multiprocessing import cpu_count
from pathlib import Path
from typing import List, Optional

import numpy as np

from pixelcluster.core.errors import ClusteringError
from pixelcluster.data.scene import load_scene
from pixelcluster.data.synthetic import generate_scene
from pixelcluster.runs.config import RunConfig, StoppingRule
from pixelcluster.runs.runner import ClusteringRunner
from pixelcluster.utils.logging import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelcluster",
        description="K-means кластеризация пикселей многоканальной сцены.",
    )
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument(
        "--input",
        type=Path,
        help="Сцена .npy/.npz: стек (bands, rows, cols) или матрица (N, D).",
    )
    src.add_argument(
        "--synthetic",
        action="store_true",
        help="Сгенерировать синтетическую сцену (make_blobs) вместо чтения файла.",
    )
    parser.add_argument("--clusters", "-k", type=int, required=True, help="Число кластеров K.")
    parser.add_argument("--passes", type=int, default=100, help="Максимум проходов.")
    parser.add_argument(
        "--stopping",
        type=str,
        choices=[r.value for r in StoppingRule],
        default=StoppingRule.FIXED_PASSES.value,
        help="Политика остановки: фиксированное число проходов или порог смещения.",
    )
    parser.add_argument(
        "--tol",
        type=float,
        default=1e-6,
        help="Порог максимального смещения центроидов (для centroid_shift).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed выбора затравок.")
    parser.add_argument(
        "--processes",
        type=int,
        default=1,
        help=f"Число процессов для прохода (доступно CPU: {cpu_count()}).",
    )
    parser.add_argument("--no-data", type=float, default=None, help="Значение no-data.")
    parser.add_argument("--output", type=Path, default=None, help="JSON со сводкой кластеров.")
    parser.add_argument("--labels", type=Path, default=None, help="Разметка сцены (.npy).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Подробный лог.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = RunConfig(
            cluster_count=args.clusters,
            max_passes=args.passes,
            stopping=StoppingRule(args.stopping),
            tol=args.tol,
            seed=args.seed,
            n_processes=args.processes,
        )

        if args.synthetic:
            seed = 42 if args.seed is None else args.seed
            scene = generate_scene(classes=args.clusters, seed=seed).scene
            name = "synthetic"
        else:
            scene = load_scene(args.input, no_data=args.no_data)
            name = args.input.stem

        result = ClusteringRunner(config, logger=logger).run(scene, name=name)
    except ClusteringError as e:
        logger.error(f"Clustering failed: {e}")
        return 2

    if args.output is not None:
        summary = {"config": config.to_dict(), **result.to_dict()}
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(summary, f, ensure_ascii=False, indent=2)
        logger.info(f"Cluster summary saved to {args.output}")

    if args.labels is not None:
        np.save(args.labels, scene.label_image(result.clusters))
        logger.info(f"Label image saved to {args.labels}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
