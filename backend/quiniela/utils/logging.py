import logging

from quiniela.config import environment


def create_logger(level: int) -> logging.Logger:
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(log_format))

    _logger = logging.getLogger("quiniela")
    _logger.setLevel(level)
    _logger.addHandler(stream_handler)
    return _logger


logger = create_logger(environment.get_log_level())
