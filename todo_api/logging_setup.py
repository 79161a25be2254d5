import logging
import sys


class _ThirdPartyFilter(logging.Filter):
    """Let todo_api and uvicorn through; other libraries only at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("todo_api") or name.startswith("uvicorn"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root logger with a single stderr handler.

    Call this once, before the server starts.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.addFilter(_ThirdPartyFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
