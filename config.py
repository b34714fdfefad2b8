"""
Settings for training and serving, read from the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Settings:
    data_dir: Path = Path("data")
    model_dir: Path = Path("models")
    log_level: str = "INFO"
    log_format: str = "text"
    random_state: int = 42
    max_iter: int = 200
    model_version: str = "1.0.0"

    @property
    def json_logs(self) -> bool:
        return self.log_format.lower() == "json"


def get_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    return Settings(
        data_dir=Path(os.getenv("DATA_DIR", "data")),
        model_dir=Path(os.getenv("MODEL_DIR", "models")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
        random_state=int(os.getenv("RANDOM_STATE", "42")),
        max_iter=int(os.getenv("MAX_ITER", "200")),
        model_version=os.getenv("MODEL_VERSION", "1.0.0"),
    )
