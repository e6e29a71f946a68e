"""
Hashrelay: actor-based record distribution

Hashrelay spreads a batch of records over a pool of xoscar worker actors,
transforms and filters each record, collects the survivors and writes a
fixed-width report once every worker has drained.

Quick Start:
    >>> from hashrelay import load_records, relay_records
    >>> records = load_records("data.json")
    >>> summary = await relay_records(records, "result.txt", n_workers=4)
    >>> print(summary.accepted, summary.rejected)
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Core API
from .actors.pipeline import RelayPipeline, relay_records
from .config import RunConfig, default_worker_count
from .loader import load_records
from .scheme import (
    Accepted,
    CollectedEntry,
    Done,
    Failed,
    Record,
    Rejected,
    RunSummary,
    WorkItem,
)
from .transforms import is_rejected, password_hash

# Actors
from .actors.collector_actor import CollectorActor
from .actors.distributor_actor import DistributorActor
from .actors.printer_actor import PrinterActor
from .actors.worker_actor import WorkerActor

# Exceptions
from .exceptions import (
    HashRelayError,
    ConfigurationError,
    InputError,
    ActorError,
    ProtocolViolation,
    ReportError,
    SinkOpenError,
    SinkWriteError,
)

__all__ = [
    # Core API
    "RelayPipeline",
    "relay_records",
    "RunConfig",
    "default_worker_count",
    "load_records",
    "password_hash",
    "is_rejected",

    # Data model
    "Record",
    "WorkItem",
    "Accepted",
    "Rejected",
    "Failed",
    "Done",
    "CollectedEntry",
    "RunSummary",

    # Actors
    "DistributorActor",
    "WorkerActor",
    "CollectorActor",
    "PrinterActor",

    # Exceptions
    "HashRelayError",
    "ConfigurationError",
    "InputError",
    "ActorError",
    "ProtocolViolation",
    "ReportError",
    "SinkOpenError",
    "SinkWriteError",
]
