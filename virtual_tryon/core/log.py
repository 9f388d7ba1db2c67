import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger("virtual_tryon")
    root.setLevel(level.upper())

    if any(getattr(h, "_virtual_tryon", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._virtual_tryon = True  # type: ignore[attr-defined]
    root.addHandler(handler)
