import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOG_HANDLERS: dict[Path, tuple[logging.Handler, int]] = {}


def configure_logging(level: str = "INFO") -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger("podcast_client").setLevel(numeric)


def attach_log_file(path: Path, logger_name: str = "podcast_client") -> Path:
    path = Path(path).resolve()
    record = _LOG_HANDLERS.get(path)
    if record:
        handler, refcount = record
        _LOG_HANDLERS[path] = (handler, refcount + 1)
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger(logger_name).addHandler(handler)
    _LOG_HANDLERS[path] = (handler, 1)
    return path


def detach_log_file(path: Path, logger_name: str = "podcast_client") -> None:
    path = Path(path).resolve()
    record = _LOG_HANDLERS.get(path)
    if not record:
        return
    handler, refcount = record
    if refcount <= 1:
        logging.getLogger(logger_name).removeHandler(handler)
        handler.close()
        del _LOG_HANDLERS[path]
    else:
        _LOG_HANDLERS[path] = (handler, refcount - 1)
