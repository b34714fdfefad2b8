"""
Training pipeline: CSV loading, stage assembly and the persisted model.

A pipeline is built from a ``DatasetSchema`` so the same stages serve every
dataset. Stages, in order:

    loader      -> headerless CSV into a frame named after ``schema.columns``
    dictionarize-> string labels to integer ids (``LabelEncoder``)
    features    -> concatenate the feature columns into one vector
    scaler      -> normalize the feature vector
    classifier  -> multinomial logistic regression
    reverse     -> integer ids back to the original label strings

Each stage consumes the column names the previous one produced, so the
feature column names in the schema must match the loader's output.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

import joblib
import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import LabelEncoder, StandardScaler

from config import Settings
from errors import ModelLoadError, ModelNotFoundError, SchemaError
from schema import DatasetSchema, get_schema

logger = logging.getLogger(__name__)

MAX_REPORTED_ROWS = 10


def _row_numbers(mask: pd.Series) -> str:
    rows = [str(i + 1) for i in np.flatnonzero(mask.to_numpy())]
    if len(rows) > MAX_REPORTED_ROWS:
        rows = rows[:MAX_REPORTED_ROWS] + ["..."]
    return ", ".join(rows)


def load_csv(path, schema: DatasetSchema, separator: str = ",") -> pd.DataFrame:
    """Read a headerless CSV laid out as ``schema.columns``.

    Feature columns come back as ``float32``, the label column as ``str``.
    Raises ``SchemaError`` for rows with the wrong number of values, for
    non-numeric features and for missing labels. A missing file propagates
    as ``FileNotFoundError``.
    """
    path = Path(path)
    try:
        raw = pd.read_csv(
            path,
            sep=separator,
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise SchemaError(f"{path} contains no rows") from exc
    except pd.errors.ParserError as exc:
        raise SchemaError(f"{path}: {exc}") from exc

    expected = len(schema.columns)
    if raw.shape[1] != expected:
        raise SchemaError(
            f"{path}: expected {expected} values per row for '{schema.name}', "
            f"found {raw.shape[1]}"
        )

    # Fields missing from short rows come back empty, like empty fields
    raw = raw.fillna("").apply(lambda column: column.str.strip())
    raw.columns = list(schema.columns)

    features = raw[list(schema.feature_columns)].apply(pd.to_numeric, errors="coerce")
    bad = features.isna().any(axis=1)
    if bad.any():
        raise SchemaError(
            f"{path}: missing or non-numeric feature values in rows {_row_numbers(bad)}"
        )

    frame = features.astype(np.float32)
    not_finite = ~np.isfinite(frame).all(axis=1)
    if not_finite.any():
        raise SchemaError(
            f"{path}: infinite or out-of-range feature values in rows {_row_numbers(not_finite)}"
        )

    frame[schema.label_column] = raw[schema.label_column]
    empty = frame[schema.label_column] == ""
    if empty.any():
        raise SchemaError(f"{path}: missing label in rows {_row_numbers(empty)}")

    logger.info("Loaded %d rows for '%s' from %s", len(frame), schema.name, path)
    return frame


def build_pipeline(schema: DatasetSchema, settings: Optional[Settings] = None) -> Pipeline:
    settings = settings or Settings()
    return Pipeline(
        [
            (
                "features",
                ColumnTransformer([("concat", "passthrough", list(schema.feature_columns))]),
            ),
            ("scaler", StandardScaler()),
            (
                "classifier",
                LogisticRegression(
                    max_iter=settings.max_iter,
                    random_state=settings.random_state,
                ),
            ),
        ]
    )


class PredictionModel:
    """A fitted pipeline plus the label dictionary used to train it."""

    def __init__(
        self,
        schema_name: str,
        pipeline: Pipeline,
        label_encoder: LabelEncoder,
        training_rows: int = 0,
        trained_at: Optional[str] = None,
    ):
        self.schema_name = schema_name
        self.pipeline = pipeline
        self.label_encoder = label_encoder
        self.training_rows = training_rows
        self.trained_at = trained_at or datetime.now(timezone.utc).isoformat()

    @property
    def schema(self) -> DatasetSchema:
        return get_schema(self.schema_name)

    @property
    def classes(self) -> List[str]:
        return [str(label) for label in self.label_encoder.classes_]

    @classmethod
    def train(
        cls,
        frame: pd.DataFrame,
        schema: DatasetSchema,
        settings: Optional[Settings] = None,
    ) -> "PredictionModel":
        labels = frame[schema.label_column]
        if labels.nunique() < 2:
            raise SchemaError(
                f"Training '{schema.name}' needs at least two distinct labels, "
                f"got {sorted(labels.unique())}"
            )

        encoder = LabelEncoder()
        y = encoder.fit_transform(labels)

        pipeline = build_pipeline(schema, settings)
        pipeline.fit(frame[list(schema.feature_columns)], y)

        model = cls(schema.name, pipeline, encoder, training_rows=len(frame))
        logger.info(
            "Trained '%s' model on %d rows, classes: %s",
            schema.name,
            len(frame),
            ", ".join(model.classes),
        )
        return model

    def _frame(self, records: Sequence) -> pd.DataFrame:
        record_type = self.schema.record_type
        records = [
            r if isinstance(r, record_type) else record_type.model_validate(r) for r in records
        ]
        return self.schema.to_frame(records)

    def predict_many(self, records: Sequence) -> list:
        if not records:
            return []
        encoded = self.pipeline.predict(self._frame(records))
        labels = self.label_encoder.inverse_transform(encoded)
        prediction_type = self.schema.prediction_type
        return [prediction_type(predicted_label=str(label)) for label in labels]

    def predict(self, record):
        return self.predict_many([record])[0]

    def confidence(self, record) -> float:
        """Probability of the predicted class."""
        proba = self.pipeline.predict_proba(self._frame([record]))
        return float(proba.max())

    def evaluate(self, frame: pd.DataFrame) -> float:
        """Accuracy against the labels in ``frame``."""
        schema = self.schema
        y_true = self.label_encoder.transform(frame[schema.label_column])
        y_pred = self.pipeline.predict(frame[list(schema.feature_columns)])
        return float(accuracy_score(y_true, y_pred))

    def write(self, path) -> Path:
        """Persist the model; the file is complete when this returns."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        joblib.dump(self, tmp_path)
        os.replace(tmp_path, path)
        logger.info("Model '%s' written to %s", self.schema_name, path)
        return path

    @classmethod
    def read(cls, path, schema: Optional[DatasetSchema] = None) -> "PredictionModel":
        path = Path(path)
        if not path.is_file():
            raise ModelNotFoundError(f"Model file not found: {path}")

        try:
            model = joblib.load(path)
        except Exception as exc:
            raise ModelLoadError(f"Could not read model from {path}: {exc}") from exc

        if not isinstance(model, cls):
            raise ModelLoadError(f"{path} does not contain a {cls.__name__}")
        if schema is not None and model.schema_name != schema.name:
            raise ModelLoadError(
                f"{path} holds a '{model.schema_name}' model, expected '{schema.name}'"
            )

        logger.info("Model '%s' read from %s", model.schema_name, path)
        return model


def train_from_csv(
    schema: DatasetSchema,
    data_path,
    settings: Optional[Settings] = None,
) -> PredictionModel:
    frame = load_csv(data_path, schema)
    return PredictionModel.train(frame, schema, settings)
