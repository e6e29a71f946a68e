import asyncio
import itertools
import random
import sys

import pytest
import pytest_asyncio
import xoscar as xo
from loguru import logger

from hashrelay.scheme import Record

_ports = itertools.count(random.randint(20000, 40000))


@pytest.fixture
def free_address():
    """A fresh local address for an actor pool."""
    return f"127.0.0.1:{next(_ports)}"


@pytest_asyncio.fixture
async def actor_pool(free_address):
    """Start an in-process xoscar pool and yield its address."""
    pool = await xo.create_actor_pool(address=free_address, n_process=0)
    try:
        yield free_address
    finally:
        await pool.stop()


@pytest.fixture
def wait_until():
    """Poll an async getter until ``predicate`` holds for its value."""

    async def _wait_until(fetch, predicate, timeout: float = 5.0, interval: float = 0.01):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            value = await fetch()
            if predicate(value):
                return value
            if loop.time() > deadline:
                raise AssertionError(f"Condition not met within {timeout}s, last value: {value!r}")
            await asyncio.sleep(interval)

    return _wait_until


@pytest.fixture
def sample_records():
    return [
        Record(password="a", passes=1, salt=1),
        Record(password="b", passes=2, salt=2),
        Record(password="c", passes=3, salt=3),
        Record(password="d", passes=4, salt=4),
    ]


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
