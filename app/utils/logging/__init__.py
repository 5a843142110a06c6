import logging

from pythonjsonlogger.json import JsonFormatter


_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Route every logger through one JSON stream handler on the root logger."""
    global _configured
    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    )
    root.addHandler(handler)
    _configured = True
