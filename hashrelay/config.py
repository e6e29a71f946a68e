"""Run configuration for the relay pipeline."""

from dataclasses import dataclass
from pathlib import Path

from hashrelay.exceptions import ConfigurationError

DEFAULT_ADDRESS = "127.0.0.1:13527"
DEFAULT_LOG_FILE = "hashrelay.log"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def default_worker_count(record_count: int) -> int:
    """
    Worker pool size used when none is configured.

    One worker per four records, never fewer than two.
    """
    return max(2, record_count // 4)


@dataclass
class RunConfig:
    """
    Settings for one relay run.

    Attributes:
        input_path: JSON file holding the input records
        output_path: Report file to write
        worker_count: Size of the worker pool; derived from the record count
            when None
        address: xoscar actor pool address
        log_level: Minimum loguru level for console and file logs
        log_file: JSON-lines log file, or None to log to the console only
    """

    input_path: Path
    output_path: Path
    worker_count: int | None = None
    address: str = DEFAULT_ADDRESS
    log_level: str = "INFO"
    log_file: Path | None = Path(DEFAULT_LOG_FILE)

    def __post_init__(self):
        self.input_path = Path(self.input_path)
        self.output_path = Path(self.output_path)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        self.log_level = self.log_level.upper()
        self.validate()

    def validate(self) -> None:
        """
        Check the settings.

        Raises:
            ConfigurationError: If any setting is out of range
        """
        if self.worker_count is not None and self.worker_count < 1:
            raise ConfigurationError(f"worker_count must be at least 1, got {self.worker_count}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not self.address:
            raise ConfigurationError("address cannot be empty")

    def resolve_worker_count(self, record_count: int) -> int:
        """Return the configured worker count, or the default for ``record_count``."""
        if self.worker_count is not None:
            return self.worker_count
        return default_worker_count(record_count)
