"""日志配置。"""

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """为根 logger 安装一个输出到 stdout 的 handler。

    重复调用只会调整级别，不会叠加 handler。
    """

    logger = logging.getLogger()
    logger.setLevel(level.upper())

    if not any(getattr(h, "_gradetrack", False) for h in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler._gradetrack = True  # type: ignore[attr-defined]
        logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger
