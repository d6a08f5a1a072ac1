import logging
import sys

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level="INFO") -> None:
    """Configure the root logger with a single stderr handler.

    Safe to call more than once: previous handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else level.upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    root.addHandler(handler)

    # SQL echo reste au niveau WARNING sauf en DEBUG
    if root.level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
