import json
from pathlib import Path

import pytest

from config import get_settings
from errors import UnknownDatasetError
from log_config import JSONFormatter, setup_logging
from schema import IRIS, MACHINE_STATUS, get_schema


def test_settings_defaults(monkeypatch):
    for name in ("DATA_DIR", "MODEL_DIR", "LOG_FORMAT", "MAX_ITER"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.data_dir == Path("data")
    assert settings.model_dir == Path("models")
    assert settings.max_iter == 200
    assert settings.json_logs is False


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("MODEL_DIR", str(tmp_path))
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    monkeypatch.setenv("RANDOM_STATE", "7")

    settings = get_settings()

    assert settings.model_dir == tmp_path
    assert settings.json_logs is True
    assert settings.random_state == 7


def test_get_schema():
    assert get_schema("iris") is IRIS
    assert get_schema("machine-status") is MACHINE_STATUS
    assert IRIS.columns[-1] == "label"
    assert len(MACHINE_STATUS.samples) == 2


def test_get_schema_unknown():
    with pytest.raises(UnknownDatasetError, match="Unknown dataset 'wine'"):
        get_schema("wine")


def test_json_logging(capsys):
    logger = setup_logging("csv-classifier-test", "debug", json_format=True)
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    logger.info("trained %s", "iris")

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["message"] == "trained iris"
    assert line["level"] == "INFO"
    logger.handlers.clear()
