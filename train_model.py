#!/usr/bin/env python3
"""
Train, persist, reload and query the iris and machine-status classifiers.

Usage examples:
  python train_model.py train
  python train_model.py train iris --data-dir data --model-dir models
  python train_model.py predict machine-status --features 103.24 10.56 20.31 25.0
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from config import Settings, get_settings
from errors import PipelineError
from log_config import setup_logging
from pipeline import PredictionModel, load_csv
from schema import IRIS, MACHINE_STATUS, SCHEMAS, DatasetSchema, get_schema

logger = logging.getLogger(__name__)


def data_path(schema: DatasetSchema, settings: Settings) -> Path:
    return settings.data_dir / schema.data_file


def model_path(schema: DatasetSchema, settings: Settings) -> Path:
    return settings.model_dir / schema.model_file


def fit(schema: DatasetSchema, settings: Settings) -> PredictionModel:
    """Train on the dataset's CSV without persisting the result."""
    frame = load_csv(data_path(schema, settings), schema)
    model = PredictionModel.train(frame, schema, settings)
    logger.info("Training accuracy for '%s': %.3f", schema.name, model.evaluate(frame))
    return model


def train(schema: DatasetSchema, settings: Settings) -> PredictionModel:
    """Train on the dataset's CSV and write the model to the model directory."""
    model = fit(schema, settings)
    model.write(model_path(schema, settings))
    return model


def predict_with_model_loaded_from_file(schema: DatasetSchema, settings: Settings, sample=None):
    """Reload the persisted model and predict ``sample`` (or the default sample)."""
    model = PredictionModel.read(model_path(schema, settings), schema)
    prediction = model.predict(sample if sample is not None else schema.default_sample)
    print(f"Predicted {schema.display_name}: {prediction.predicted_label}")
    return prediction


def run_iris(settings: Settings):
    train(IRIS, settings)
    return predict_with_model_loaded_from_file(IRIS, settings)


def run_machine_status(settings: Settings):
    schema = MACHINE_STATUS
    first_sample, second_sample = schema.samples

    model = fit(schema, settings)
    first = model.predict(first_sample)
    print(f"1. Predicted {schema.display_name}: {first.predicted_label}")

    model.write(model_path(schema, settings))
    reloaded = PredictionModel.read(model_path(schema, settings), schema)
    second = reloaded.predict(second_sample)
    print(f"2. Predicted {schema.display_name}: {second.predicted_label}")
    return first, second


RUNNERS = {
    IRIS.name: run_iris,
    MACHINE_STATUS.name: run_machine_status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train and query the iris and machine-status classifiers"
    )
    parser.add_argument("--data-dir", type=Path, help="Directory holding the CSV files")
    parser.add_argument("--model-dir", type=Path, help="Directory for persisted models")
    subparsers = parser.add_subparsers(dest="command", required=True)

    train_parser = subparsers.add_parser("train", help="Train, persist and demo-predict")
    train_parser.add_argument(
        "dataset", nargs="?", default="all", choices=[*SCHEMAS, "all"], help="Dataset to train"
    )

    predict_parser = subparsers.add_parser("predict", help="Predict with a persisted model")
    predict_parser.add_argument("dataset", choices=list(SCHEMAS))
    predict_parser.add_argument(
        "--features",
        type=float,
        nargs=4,
        metavar="VALUE",
        help="The four feature values in CSV column order (default: built-in sample)",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.data_dir is not None:
        settings.data_dir = args.data_dir
    if args.model_dir is not None:
        settings.model_dir = args.model_dir
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)

    try:
        if args.command == "train":
            names = list(RUNNERS) if args.dataset == "all" else [args.dataset]
            for name in names:
                RUNNERS[name](settings)
        else:
            schema = get_schema(args.dataset)
            sample = None
            if args.features:
                sample = schema.record_type(**dict(zip(schema.feature_columns, args.features)))
            predict_with_model_loaded_from_file(schema, settings, sample)
    except (PipelineError, FileNotFoundError, ValidationError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
