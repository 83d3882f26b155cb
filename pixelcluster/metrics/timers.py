"""
Таймер прохода кластеризации.

Контекстный менеджер на time.perf_counter(); используется движком для
T_pass и драйвером запуска для T_init и полного времени запуска.
"""
from __future__ import annotations

import time
from typing import Any


class Timer:
    """
    Замер времени участка кода.

    Пример:
        with Timer() as t:
            engine.iterate(source)
        t.elapsed  # секунды

    Повторный вход перезаписывает start/end/elapsed.
    """

    def __init__(self) -> None:
        self.start: float = 0.0
        self.end: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> Timer:
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        # Замер фиксируется и при исключении внутри блока
        self.end = time.perf_counter()
        self.elapsed = self.end - self.start
