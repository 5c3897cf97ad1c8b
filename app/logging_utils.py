import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"

_handler: logging.Handler | None = None


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install the ledger stream handler on the root logger and set its level."""

    global _handler
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
