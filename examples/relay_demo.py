"""
Relay Demo

This example runs the relay twice on generated records: once with the
default password_hash transform and once with a slow asynchronous transform,
to show that the report is only written after every worker has drained.

Usage:
    python examples/relay_demo.py
"""

import asyncio
import random
import string
from pathlib import Path

from hashrelay.actors.pipeline import RelayPipeline
from hashrelay.logging_config import setup_logging
from hashrelay.scheme import Record
from hashrelay.transforms import password_hash


def create_sample_records(count: int = 20) -> list[Record]:
    """Create random records for demonstration."""
    rng = random.Random(42)
    return [
        Record(
            password="".join(rng.choices(string.ascii_letters + string.digits, k=8)),
            passes=rng.randint(1, 100),
            salt=rng.randint(1, 1000),
        )
        for _ in range(count)
    ]


async def slow_hash(record: Record) -> str:
    """Default transform behind a random delay."""
    await asyncio.sleep(random.uniform(0.0, 0.05))
    return password_hash(record)


async def demo(output_dir: Path):
    records = create_sample_records()

    pipeline = RelayPipeline(output_path=output_dir / "relay_fast.txt", n_workers=4)
    await pipeline.initialize()
    try:
        summary = await pipeline.run(records)
        print("=" * 60)
        print("Default transform")
        print("=" * 60)
        print(f"Accepted: {summary.accepted}, rejected: {summary.rejected}")
        for worker_index, indices in summary.assignments.items():
            print(f"  worker {worker_index}: records {list(indices)}")
        print()

        pipeline.transform = slow_hash
        pipeline.output_path = output_dir / "relay_slow.txt"
        summary = await pipeline.run(records)
        print("=" * 60)
        print("Slow asynchronous transform")
        print("=" * 60)
        print(f"Accepted: {summary.accepted}, rejected: {summary.rejected}")
        print(f"Report: {pipeline.output_path} ({summary.rows_written} rows)")
    finally:
        await pipeline.shutdown()


if __name__ == "__main__":
    setup_logging(default_level="WARNING", log_file=None)
    asyncio.run(demo(Path(".")))
