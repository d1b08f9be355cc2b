import logging
import os
import sys


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True  # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)


log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def configure_logging(level: str = None, allowed_namespaces=None) -> logging.Logger:
    """Attach the console handler to the ``salestraffic`` package logger.

    Modules log through ``logging.getLogger(__name__)`` so their records
    propagate here. ``LOG_LEVEL`` overrides the default INFO level and
    ``LOG_NAMESPACES`` (comma separated) restricts output to the given
    logger prefixes, e.g. ``salestraffic.features.auth``.
    """
    app_logger = logging.getLogger("salestraffic")
    app_logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())

    if allowed_namespaces is None:
        raw = os.getenv("LOG_NAMESPACES", "")
        allowed_namespaces = [ns.strip() for ns in raw.split(",") if ns.strip()]

    # Calling this twice (e.g. app factory in tests) must not duplicate output
    for handler in list(app_logger.handlers):
        if getattr(handler, "_salestraffic_console", False):
            app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.addFilter(NamespaceFilter(allowed_namespaces))
    console_handler._salestraffic_console = True
    app_logger.addHandler(console_handler)

    # The cache is chatty at DEBUG; keep it quiet unless asked for.
    logging.getLogger("salestraffic.core.cache").setLevel(
        os.getenv("CACHE_LOG_LEVEL", "INFO").upper()
    )
    return app_logger
