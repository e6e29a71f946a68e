from pathlib import Path

import pytest
from hashrelay.config import DEFAULT_ADDRESS, RunConfig, default_worker_count
from hashrelay.exceptions import ConfigurationError


@pytest.mark.parametrize(
    "record_count, expected",
    [(0, 2), (1, 2), (2, 2), (3, 2), (7, 2), (8, 2), (12, 3), (30, 7)],
)
def test_default_worker_count(record_count, expected):
    assert default_worker_count(record_count) == expected


class TestRunConfig:
    def test_defaults(self):
        config = RunConfig(input_path="in.json", output_path="out.txt")
        assert config.input_path == Path("in.json")
        assert config.output_path == Path("out.txt")
        assert config.worker_count is None
        assert config.address == DEFAULT_ADDRESS
        assert config.log_level == "INFO"

    def test_log_level_normalized(self):
        assert RunConfig("in.json", "out.txt", log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError):
            RunConfig("in.json", "out.txt", log_level="chatty")

    def test_invalid_worker_count(self):
        with pytest.raises(ConfigurationError):
            RunConfig("in.json", "out.txt", worker_count=0)

    def test_empty_address(self):
        with pytest.raises(ConfigurationError):
            RunConfig("in.json", "out.txt", address="")

    def test_resolve_worker_count(self):
        assert RunConfig("in.json", "out.txt").resolve_worker_count(40) == 10
        assert RunConfig("in.json", "out.txt", worker_count=3).resolve_worker_count(40) == 3
