import logging
import sys
import contextvars
from typing import Optional

# Context variable to carry the address of the resource currently being handled
_RESOURCE: contextvars.ContextVar[str] = contextvars.ContextVar("resource", default="-")


class _ResourceFilter(logging.Filter):
    """Logging filter that injects the current resource address from contextvars into the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.resource = _RESOURCE.get()
        return True


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | res=%(resource)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_root_logger(level: str = "INFO") -> None:
    """
    Configure root logger and the openhab_provider logger.

    Root logger stays at WARNING so httpx/httpcore request chatter stays out of
    plan/apply output. Only the openhab_provider namespace follows the requested level.

    Args:
        level: Log level for openhab_provider logs (DEBUG, INFO, WARNING, ERROR).

    Safe to call multiple times; it will not duplicate handlers (idempotent).
    """
    root = logging.getLogger()
    package_logger = logging.getLogger("openhab_provider")

    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and any(isinstance(f, _ResourceFilter) for f in h.filters):
            # Already configured; just update the package logger level
            package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())
    handler.addFilter(_ResourceFilter())
    handler.setLevel(logging.DEBUG)
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str = "openhab_provider") -> logging.Logger:
    """
    Get a module-specific logger.

    Handlers live on the root logger (see configure_root_logger); this only
    hands out the named child so records carry the module name.
    """
    return logging.getLogger(name)


def push_resource(address: Optional[str]) -> Optional[contextvars.Token]:
    """Set the current resource address in context and return a token for later reset."""
    if not address:
        return None
    return _RESOURCE.set(address)


def reset_resource(token: Optional[contextvars.Token]) -> None:
    """Reset the resource context using the provided token (if any)."""
    if token is None:
        return
    _RESOURCE.reset(token)
