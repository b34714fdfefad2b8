import logging

import pytest

from config import Settings

IRIS_ROWS = [
    "5.1,3.5,1.4,0.2,Iris-setosa",
    "4.9,3.0,1.4,0.2,Iris-setosa",
    "4.7,3.2,1.3,0.2,Iris-setosa",
    "5.0,3.6,1.4,0.2,Iris-setosa",
    "5.4,3.9,1.7,0.4,Iris-setosa",
    "7.0,3.2,4.7,1.4,Iris-versicolor",
    "6.4,3.2,4.5,1.5,Iris-versicolor",
    "6.9,3.1,4.9,1.5,Iris-versicolor",
    "5.5,2.3,4.0,1.3,Iris-versicolor",
    "6.5,2.8,4.6,1.5,Iris-versicolor",
    "6.3,3.3,6.0,2.5,Iris-virginica",
    "7.1,3.0,5.9,2.1,Iris-virginica",
    "7.6,3.0,6.6,2.1,Iris-virginica",
    "7.2,3.6,6.1,2.5,Iris-virginica",
    "7.7,3.8,6.7,2.2,Iris-virginica",
]

MACHINE_ROWS = [
    "70.12,6.10,21.00,30.00,Normal",
    "68.40,5.80,22.10,28.50,Normal",
    "72.95,6.45,20.70,31.20,Normal",
    "75.30,6.90,19.80,27.40,Normal",
    "88.20,8.40,21.50,26.00,Warning",
    "90.05,8.90,20.20,25.10,Warning",
    "86.70,8.10,22.30,29.90,Warning",
    "92.40,9.20,21.10,24.60,Warning",
    "104.10,10.80,20.40,25.30,Critical",
    "102.60,10.30,20.90,24.20,Critical",
    "106.90,11.40,21.70,23.80,Critical",
    "101.80,10.15,19.90,26.10,Critical",
]


def write_csv(path, rows):
    path.write_text("\n".join(rows) + "\n")
    return path


@pytest.fixture
def iris_csv(tmp_path):
    """Headerless iris CSV with five rows per species."""
    return write_csv(tmp_path / "iris-data.txt", IRIS_ROWS)


@pytest.fixture
def machine_csv(tmp_path):
    return write_csv(tmp_path / "MachineStatus.data.csv", MACHINE_ROWS)


@pytest.fixture
def settings(tmp_path, iris_csv, machine_csv):
    """Settings pointing at the temporary CSVs and an empty model directory."""
    return Settings(data_dir=tmp_path, model_dir=tmp_path / "models")


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI and the app reconfigure the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
