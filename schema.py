from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Type

import numpy as np
import pandas as pd
from pydantic import BaseModel

from errors import UnknownDatasetError


class IrisData(BaseModel):
    sepal_length: float
    sepal_width: float
    petal_length: float
    petal_width: float
    # Only provided for training rows
    label: Optional[str] = None


class IrisPrediction(BaseModel):
    predicted_label: str


class MachineStatusData(BaseModel):
    machine_temperature: float
    machine_pressure: float
    ambient_temperature: float
    ambient_humidity: float
    label: Optional[str] = None


class MachineStatusPrediction(BaseModel):
    predicted_label: str


class PredictionResponse(BaseModel):
    predicted_label: str
    confidence: float
    model_version: str


class HealthResponse(BaseModel):
    status: str
    models_loaded: List[str]


@dataclass(frozen=True)
class DatasetSchema:
    """Column layout, record types and file names for one dataset."""

    name: str
    display_name: str
    record_type: Type[BaseModel]
    prediction_type: Type[BaseModel]
    feature_columns: Tuple[str, ...]
    data_file: str
    model_file: str
    samples: Tuple[BaseModel, ...] = ()
    label_column: str = "label"

    @property
    def columns(self) -> Tuple[str, ...]:
        """CSV column order: the features, then the label."""
        return self.feature_columns + (self.label_column,)

    @property
    def default_sample(self) -> BaseModel:
        return self.samples[0]

    def to_frame(self, records: Sequence[BaseModel]) -> pd.DataFrame:
        rows = [record.model_dump(include=set(self.feature_columns)) for record in records]
        return pd.DataFrame(rows, columns=list(self.feature_columns)).astype(np.float32)


IRIS = DatasetSchema(
    name="iris",
    display_name="iris species",
    record_type=IrisData,
    prediction_type=IrisPrediction,
    feature_columns=("sepal_length", "sepal_width", "petal_length", "petal_width"),
    data_file="iris-data.txt",
    model_file="IrisModel.joblib",
    samples=(
        IrisData(sepal_length=3.3, sepal_width=1.6, petal_length=0.2, petal_width=5.1),
    ),
)

MACHINE_STATUS = DatasetSchema(
    name="machine-status",
    display_name="machine status",
    record_type=MachineStatusData,
    prediction_type=MachineStatusPrediction,
    feature_columns=(
        "machine_temperature",
        "machine_pressure",
        "ambient_temperature",
        "ambient_humidity",
    ),
    data_file="MachineStatus.data.csv",
    model_file="MachineStatusPredictionModel.joblib",
    samples=(
        MachineStatusData(
            machine_temperature=103.24,
            machine_pressure=10.56,
            ambient_temperature=20.31,
            ambient_humidity=25.00,
        ),
        MachineStatusData(
            machine_temperature=102.01,
            machine_pressure=10.12,
            ambient_temperature=20.41,
            ambient_humidity=24.00,
        ),
    ),
)

SCHEMAS = {schema.name: schema for schema in (IRIS, MACHINE_STATUS)}


def get_schema(name: str) -> DatasetSchema:
    try:
        return SCHEMAS[name]
    except KeyError:
        raise UnknownDatasetError(name) from None
