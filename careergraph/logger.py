"""
Structured logging system for careergraph.

Provides centralized logging with console and file outputs, plus
reconciliation metrics (upserts, stubs, fuzzy matches, merges) for
spotting duplicate-prone lookups.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json

UPSERT_METRICS = {"person": "persons_upserted", "company": "companies_upserted"}


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring entity reconciliation.
    """

    def __init__(
        self,
        name: str = "careergraph",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = self._empty_metrics()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"careergraph_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "persons_upserted": 0,
            "companies_upserted": 0,
            "stubs_created": {"person": 0, "company": 0},
            "fuzzy_matches": 0,
            "ambiguous_matches": 0,
            "merges": 0,
            "corrupt_blobs": {},
            "edges_dropped": 0,
        }

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_upsert(self, kind: str):
        """Count a direct lookup folded into the store."""
        self.metrics[UPSERT_METRICS[kind]] += 1

    def record_stub(self, kind: str):
        """Count a placeholder record created for a referenced entity."""
        self.metrics["stubs_created"][kind] += 1

    def record_resolution(self, match):
        """Count fuzzy and ambiguous key resolutions."""
        if match.kind == "fuzzy":
            self.metrics["fuzzy_matches"] += 1
        if match.ambiguous:
            self.metrics["ambiguous_matches"] += 1

    def record_merge(self):
        self.metrics["merges"] += 1

    def record_corrupt_blob(self, blob_name: str):
        """Count a persisted blob that could not be decoded."""
        counts = self.metrics["corrupt_blobs"]
        counts[blob_name] = counts.get(blob_name, 0) + 1

    def record_dropped_edge(self):
        self.metrics["edges_dropped"] += 1

    def get_metrics(self) -> dict:
        """Return a copy of current metrics."""
        metrics_copy = json.loads(json.dumps(self.metrics))
        metrics_copy["stubs_created"]["total"] = sum(self.metrics["stubs_created"].values())
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Reconciliation Metrics ===")
        self.info(f"Upserts: {metrics['persons_upserted']} persons, {metrics['companies_upserted']} companies")
        stubs = metrics["stubs_created"]
        self.info(f"Stubs: {stubs['total']} ({stubs['person']} persons, {stubs['company']} companies)")
        self.info(f"Fuzzy matches: {metrics['fuzzy_matches']} ({metrics['ambiguous_matches']} ambiguous)")
        self.info(f"Company merges: {metrics['merges']}")

        if metrics["edges_dropped"]:
            self.info(f"Dangling edges dropped: {metrics['edges_dropped']}")

        if metrics["corrupt_blobs"]:
            self.info("Corrupt blobs:")
            for blob_name, count in metrics["corrupt_blobs"].items():
                self.info(f"  {blob_name}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "careergraph",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
