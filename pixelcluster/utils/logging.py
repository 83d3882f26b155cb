import logging
from typing import Any, Dict


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """
    Создаёт и настраивает корневой логгер проекта ``pixelcluster``.

    :param level: минимальный уровень логирования
    :return: настроенный экземпляр :class:`logging.Logger`
    """
    logger = logging.getLogger("pixelcluster")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Чтобы сообщения не дублировались через root-логгер
    logger.propagate = False

    return logger


def format_run_prefix(meta: Dict[str, Any]) -> str:
    """
    Текстовый префикс для логов запуска.

    Ожидается словарь с ключами ``K``, ``D``, ``N`` и опциональным ``name``.
    """
    prefix = f"[K={meta['K']} D={meta['D']} N={meta['N']}"
    if meta.get("name"):
        prefix += f" name={meta['name']}"
    return prefix + "]"
