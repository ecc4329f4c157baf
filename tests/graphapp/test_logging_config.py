"""Tests for logging setup."""

import logging
import os

import pytest

from graphapp.logging_config import build_logging_config, resolve_log_level


@pytest.mark.parametrize(
    "name, expected",
    [
        ("debug", (logging.DEBUG, True)),
        (" WARNING ", (logging.WARNING, True)),
        (None, (logging.INFO, True)),
        ("verbose", (logging.INFO, False)),
    ],
)
def test_resolve_log_level(name, expected):
    assert resolve_log_level(name) == expected


def test_log_file_lives_in_log_dir(tmp_path):
    config = build_logging_config(str(tmp_path), logging.ERROR)

    assert config["handlers"]["file"]["filename"] == os.path.join(str(tmp_path), "graphapp.log")
    assert config["root"]["level"] == logging.ERROR
    assert config["loggers"]["sqlalchemy.engine"]["level"] == logging.WARNING
