"""
Actor-based record distribution components.

This module provides the xoscar actors of the relay protocol and the
pipeline driver that submits records to them.
"""

from hashrelay.actors.collector_actor import CollectorActor
from hashrelay.actors.distributor_actor import DistributorActor
from hashrelay.actors.pipeline import RelayPipeline, relay_records
from hashrelay.actors.printer_actor import PrinterActor
from hashrelay.actors.worker_actor import WorkerActor

__all__ = [
    "DistributorActor",
    "WorkerActor",
    "CollectorActor",
    "PrinterActor",
    "RelayPipeline",
    "relay_records",
]
