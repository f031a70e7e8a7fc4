# ============================================================================
# STL Reader -- Structured Logger (stlreader/monitoring/logger.py)
# ============================================================================
#
# WHAT THIS FILE DOES:
#   Sets up structlog for the reader. Every read produces machine-readable
#   JSON events (read started, block parsed, read finished/failed), so a
#   batch conversion of thousands of files can be audited with jq or grep.
#
# LOG FILE TYPES:
#   - console (stdout): warnings and above, via the stdlib root logger
#   - error_YYYY-MM-DD.log: failed reads, written by get_error_logger()
#
# HOW TO USE (from other code):
#   from stlreader.monitoring.logger import get_logger
#   logger = get_logger("stlreader.reader")
#   logger.info("stl_block_parsed", nodes=120, triangles=236)
#
# DEPENDENCIES:
#   - structlog: structured logging that outputs JSON
#   - Python's built-in logging module (structlog builds on top of it)
# ============================================================================

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any
import structlog
from datetime import datetime


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

class LoggerSetup:
    """Initialize and configure structlog for the STL reader"""

    def __init__(self, log_dir: str = "logs", level: str = "WARNING"):
        self.log_dir = Path(log_dir)
        self.level = getattr(logging, str(level).upper(), logging.WARNING)
        self._configured = False

    def setup(self) -> None:
        """Configure structlog on top of standard logging"""
        if self._configured:
            return

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.level,
        )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._configured = True

    def get_logger(self, name: str) -> structlog.BoundLogger:
        """Get a named structlog logger"""
        self.setup()
        return structlog.get_logger(name)

    def get_file_logger(self, name: str, log_type: str = "error") -> structlog.BoundLogger:
        """
        Get a logger that also writes to <log_dir>/<log_type>_YYYY-MM-DD.log.
        The log folder is created on first use only.
        """
        self.setup()
        logger = structlog.get_logger(name)

        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{log_type}_{self._get_date_str()}.log"

        py_logger = logging.getLogger(name)
        already = any(
            isinstance(h, logging.FileHandler)
            and h.baseFilename == os.path.abspath(log_file)
            for h in py_logger.handlers
        )
        if not already:
            handler = logging.FileHandler(log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            py_logger.addHandler(handler)
        py_logger.setLevel(logging.DEBUG)

        return logger

    @staticmethod
    def _get_date_str() -> str:
        """Get current date as YYYY-MM-DD string"""
        return datetime.now().strftime("%Y-%m-%d")


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_logger_setup: Optional[LoggerSetup] = None


def initialize_logging(log_dir: str = "logs", level: str = "WARNING") -> LoggerSetup:
    """Initialize logging (call once at app startup, e.g. with config.logging)"""
    global _logger_setup
    if _logger_setup is None:
        _logger_setup = LoggerSetup(log_dir, level)
        _logger_setup.setup()
    return _logger_setup


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger (auto-initializes if needed)"""
    if _logger_setup is None:
        initialize_logging()
    return _logger_setup.get_logger(name)


def get_error_logger(name: str = "error") -> structlog.BoundLogger:
    """Get error logger (writes to error_YYYY-MM-DD.log)"""
    if _logger_setup is None:
        initialize_logging()
    return _logger_setup.get_file_logger(name, "error")


# ============================================================================
# LOG ENTRY BUILDERS (for consistent structured data)
# ============================================================================

class ReadLogEntry:
    """Builder for the structured summary of one STL read"""

    @staticmethod
    def build(
        source: str,
        stl_format: str,
        blocks: int,
        nodes: int,
        triangles: int,
        elapsed_ms: float,
        error: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build a structured read log entry"""
        return {
            "source": source,
            "format": stl_format,
            "blocks": blocks,
            "nodes": nodes,
            "triangles": triangles,
            "elapsed_ms": round(elapsed_ms, 2),
            "error": error,
            "timestamp": datetime.now().isoformat(),
        }
