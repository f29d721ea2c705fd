"""Shared fixtures for keeper tests."""

import pytest
from pathlib import Path


def rising_ints(length: int) -> bytes:
    """Bytes 0, 1, 2, ... wrapping at 256."""
    return bytes(i % 256 for i in range(length))


# File name -> content of the standard test directory
SAMPLE_FILES = {
    "0_byte_file": b"",
    "1_byte_file_0_value": bytes([0]),
    "1_byte_file_128_value": bytes([128]),
    "10_byte_file_rising_ints": rising_ints(10),
    "100_byte_file_rising_ints": rising_ints(100),
    "100_byte_file_0_value": bytes(100),
    "100_byte_file_255_value": bytes([255]) * 100,
    "hello_world_file_plain": b"Hello World!",
    "hello_world_file_nl": b"Hello World!\n",
    "hello_world_file_crnl": b"Hello World!\r\n",
}

EXPECTED_SFV = """; Generated by keeper
;
0_byte_file 00000000
100_byte_file_0_value 9988C6CA
100_byte_file_255_value 03D28681
100_byte_file_rising_ints 58C932F5
10_byte_file_rising_ints 456CD746
1_byte_file_0_value D202EF8D
1_byte_file_128_value 3FBA6CAD
hello_world_file_crnl 85892AE0
hello_world_file_nl 7D14DDDD
hello_world_file_plain 1C291CA3
"""


@pytest.fixture
def sample_dir(tmp_path) -> Path:
    """Directory populated with SAMPLE_FILES (always the same content)."""
    directory = tmp_path / "data"
    directory.mkdir()
    for name, content in SAMPLE_FILES.items():
        (directory / name).write_bytes(content)
    return directory


@pytest.fixture
def expected_sfv() -> bytes:
    """Manifest bytes recorded for sample_dir."""
    return EXPECTED_SFV.encode("ascii")


@pytest.fixture
def sample_files() -> dict:
    return dict(SAMPLE_FILES)
