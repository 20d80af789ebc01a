"""Tests for YAML config loading."""

import pytest

from voterroll.config.loader import (
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    DEFAULT_SQLITE_PATH,
    get_log_level,
    get_query_timeout,
    get_storage_path,
    load_config,
)


def test_load_config_reads_sections(tmp_path):
    path = tmp_path / "voterroll.config.yaml"
    path.write_text(
        "storage:\n  sqlite_path: data/roll.db\nquery:\n  timeout_seconds: 2.5\nlogging:\n  level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert get_storage_path(config) == "data/roll.db"
    assert get_query_timeout(config) == 2.5
    assert get_log_level(config) == "DEBUG"


def test_missing_sections_use_defaults(tmp_path):
    path = tmp_path / "voterroll.config.yaml"
    path.write_text("", encoding="utf-8")
    config = load_config(path)
    assert get_storage_path(config) == DEFAULT_SQLITE_PATH
    assert get_query_timeout(config) == DEFAULT_QUERY_TIMEOUT_SECONDS
    assert get_log_level(config) == "INFO"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "storage: nope\n",
        "query:\n  timeout_seconds: -1\n",
        "query:\n  timeout_seconds: soon\n",
    ],
)
def test_invalid_structure_raises(tmp_path, text):
    path = tmp_path / "voterroll.config.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
