class PipelineError(Exception):
    """Base class for errors raised by this project."""


class SchemaError(PipelineError, ValueError):
    """Training or input data does not match the dataset schema."""


class UnknownDatasetError(PipelineError, KeyError):
    def __init__(self, name):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Unknown dataset '{self.name}'"


class ModelNotFoundError(PipelineError, FileNotFoundError):
    """No persisted model at the requested path."""


class ModelLoadError(PipelineError):
    """A persisted file could not be used as a model for the requested dataset."""
