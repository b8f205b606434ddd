# -*- coding: utf-8 -*-
"""日志模块。"""
import logging
import os
import sys
from typing import Optional

# 库模块用 logging.getLogger(__name__)，都挂在这个包 logger 之下
PACKAGE_LOGGER = "src"

LOG_LEVEL_ENV = "NOVEL_BRANCH_LOG_LEVEL"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def level_from_env(default: int = logging.INFO) -> int:
    """读取 NOVEL_BRANCH_LOG_LEVEL（DEBUG/INFO/WARNING/...），未设置或无效时用 default。"""
    value = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "").strip().upper())
    return value if isinstance(value, int) else default


def _attach(logger: logging.Logger, level: int) -> None:
    if not logger.handlers:
        logger.setLevel(level)
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(h)


def get_logger(name: str = "novel_branch", level: Optional[int] = None) -> logging.Logger:
    """
    命令行入口使用的 logger，同时让 src.* 库模块的日志以同一级别输出。
    level 缺省时读环境变量 NOVEL_BRANCH_LOG_LEVEL。
    """
    resolved = level if level is not None else level_from_env()
    logger = logging.getLogger(name)
    _attach(logger, resolved)
    _attach(logging.getLogger(PACKAGE_LOGGER), resolved)
    return logger
