import logging
import sys

ROOT_LOGGER_NAME = "academy"


def configure_logging(debug: bool = False) -> None:
    """Set the level every ``Logger`` inherits: DEBUG in debug mode, INFO otherwise."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG if debug else logging.INFO)


class Logger:
    """Named child of the ``academy`` logger writing to stdout."""

    def __init__(self, name: str = __name__):
        self._logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            self._logger.addHandler(handler)

    @property
    def level(self) -> int:
        return self._logger.getEffectiveLevel()

    def info(self, msg: str, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)
