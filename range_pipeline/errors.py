from __future__ import annotations


class RangePipelineError(Exception):
    """Base class for every error raised by range_pipeline."""


class MalformedStageError(RangePipelineError, ValueError):
    """A stage definition or value range could not be built from its input."""

    def __init__(self, message: str, line_no: int | None = None):
        self.line_no = line_no
        if line_no is not None:
            message = "line %d: %s" % (line_no, message)
        super().__init__(message)


class SearchBoundExceeded(RangePipelineError):
    """The minimization scan reached its horizon without a match."""

    def __init__(self, horizon: int):
        self.horizon = horizon
        super().__init__("no final value below %d maps back into the value ranges" % horizon)


class ConfigError(RangePipelineError, ValueError):
    pass
