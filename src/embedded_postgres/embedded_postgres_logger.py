"""
Logging for embedded_postgres. Each record is emitted as a single JSON line.
"""

import inspect
import logging
from typing import Optional

from pydantic import BaseModel


class LogLine(BaseModel):
    """
    Represents a line in the embedded_postgres log
    """

    caller_file: str
    caller_name: str
    caller_line: int
    level: str
    message: str


class EmbeddedPostgresLogger:
    """
    Logger class
    """

    def __init__(self, name: str = "embedded_postgres", level: Optional[int] = logging.INFO) -> None:
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level)

    def log(self, debug_message: str, level: int) -> None:
        """
        Log the debug message with the caller's location attached
        """
        debug_message = debug_message.replace("\n", " ")

        # Collect details about the caller
        curframe = inspect.currentframe()
        calframe = inspect.getouterframes(curframe, 2)
        caller_file = calframe[1][1].replace("\\", "/").split("/")[-1]
        caller_line = calframe[1][2]
        caller_name = calframe[1][3]

        debug_log_line = LogLine(
            caller_file=caller_file,
            caller_name=caller_name,
            caller_line=caller_line,
            level=logging.getLevelName(level),
            message=debug_message,
        )

        self.logger.log(level=level, msg=debug_log_line.model_dump_json())
