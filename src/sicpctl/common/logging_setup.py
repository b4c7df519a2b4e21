import logging


class LoggingConstants:
    FORMAT = "[%(levelname)-7s] %(asctime)s %(name)s: %(message)s"
    DEFAULT_LEVEL = logging.WARNING


def setup_logging(level: int = LoggingConstants.DEFAULT_LEVEL) -> None:
    logging.basicConfig(level=level, format=LoggingConstants.FORMAT)
