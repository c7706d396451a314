# carquery/errors.py


class PipelineError(Exception):
    """Base class for every failure the pipeline reports as an outcome."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InputError(PipelineError):
    pass


class BackendError(PipelineError):
    """The synthesis backend was unreachable or answered with a non-success status."""


class EmptyResponseError(BackendError):
    """The synthesis backend answered but produced no usable text."""


class StoreUnavailableError(PipelineError):
    """The tabular store could not be opened."""


class ExecutionError(PipelineError):
    """The store rejected an accepted statement (syntax, unknown column, ...)."""
