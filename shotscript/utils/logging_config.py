import sys
from typing import Optional
from loguru import logger


class LoggerManager:
    def __init__(self):
        self.console_sink_id = None
        self.file_sink_id = None
        self.level = "INFO"

        # Always remove the default handler
        logger.remove()

    def enable_console(self, level: Optional[str] = None):
        if level and level != self.level:
            self.level = level
            self.disable_console()
        if self.console_sink_id is None:
            self.console_sink_id = logger.add(sys.stderr, level=self.level, colorize=True)

    def disable_console(self):
        if self.console_sink_id is not None:
            logger.remove(self.console_sink_id)
            self.console_sink_id = None

    def enable_file(self, path: str, level: Optional[str] = None):
        if self.file_sink_id is None:
            self.file_sink_id = logger.add(
                path, level=level or self.level, rotation="10 MB", retention="7 days", encoding="utf-8"
            )

    def configure(self, logging_config):
        """Apply a LoggingConfig: console at its level, plus a file sink if configured."""
        self.enable_console(level=logging_config.level.upper())
        if logging_config.log_file:
            self.enable_file(logging_config.log_file)


log_manager = LoggerManager()
