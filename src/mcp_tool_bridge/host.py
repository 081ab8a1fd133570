"""Contract of the host application the plugin is loaded into."""

import logging
from typing import (
    Any,
    Mapping,
    Optional,
    Protocol,
)


class HostLogger(Protocol):
    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class HostAPI(Protocol):
    """Plugin API handed over by the host on registration."""

    logger: HostLogger
    config: Optional[Mapping[str, Any]]

    def register_tool(self, spec: Mapping[str, Any]) -> None: ...

    def register_service(self, spec: Mapping[str, Any]) -> None: ...


class HostLogHandler(logging.Handler):
    """Forward log records to the host's logger.

    INFO and below go to ``info``, WARNING to ``warning`` when the host logger
    has one (``info`` otherwise), ERROR and above to ``error``.
    """

    def __init__(self, host_logger: HostLogger, prefix: str = "[MCP] ", level: int = logging.INFO):
        super().__init__(level)
        self.host_logger = host_logger
        self.prefix = prefix

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = f"{self.prefix}{self.format(record)}"
            if record.levelno >= logging.ERROR:
                self.host_logger.error(message)
            elif record.levelno >= logging.WARNING:
                getattr(self.host_logger, "warning", self.host_logger.info)(message)
            else:
                self.host_logger.info(message)
        except Exception:
            self.handleError(record)
