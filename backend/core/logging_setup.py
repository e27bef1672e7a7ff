import logging
import sys

_HANDLER_NAME = "dealership-backoffice"
_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(settings) -> logging.Logger:
    """Configure the root logger once and route uvicorn's loggers through it."""
    level = getattr(logging, settings.log_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    # avoid duplicate handlers on reload
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.handlers.clear()
        lg.propagate = True

    # SQL echo is controlled by DATABASE_ECHO, not by the app log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return root
