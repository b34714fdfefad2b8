import logging
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, HTTPException

from config import get_settings
from errors import ModelLoadError, ModelNotFoundError
from log_config import setup_logging
from pipeline import PredictionModel
from schema import (
    IRIS,
    MACHINE_STATUS,
    SCHEMAS,
    DatasetSchema,
    HealthResponse,
    IrisData,
    MachineStatusData,
    PredictionResponse,
)

logger = logging.getLogger(__name__)

models: Dict[str, PredictionModel] = {}


def load_models(model_dir) -> Dict[str, PredictionModel]:
    """Read every registered dataset's model; missing ones are skipped."""
    loaded = {}
    for name, schema in SCHEMAS.items():
        try:
            loaded[name] = PredictionModel.read(model_dir / schema.model_file, schema)
        except (ModelNotFoundError, ModelLoadError) as e:
            logger.warning("Model for '%s' not loaded: %s", name, e)
    return loaded


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)
    models.update(load_models(settings.model_dir))
    app.state.model_version = settings.model_version
    yield
    models.clear()


app = FastAPI(
    title="Iris and Machine Status Classifier API",
    version="1.0.0",
    lifespan=lifespan,
)


def _predict(schema: DatasetSchema, request) -> PredictionResponse:
    model = models.get(schema.name)
    if model is None:
        raise HTTPException(status_code=503, detail=f"Model for '{schema.name}' is not loaded")

    prediction = model.predict(request)
    return PredictionResponse(
        predicted_label=prediction.predicted_label,
        confidence=model.confidence(request),
        model_version=app.state.model_version,
    )


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", models_loaded=sorted(models))


@app.post("/predict/iris", response_model=PredictionResponse)
def predict_iris(request: IrisData):
    return _predict(IRIS, request)


@app.post("/predict/machine-status", response_model=PredictionResponse)
def predict_machine_status(request: MachineStatusData):
    return _predict(MACHINE_STATUS, request)
