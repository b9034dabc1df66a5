"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when strict output contracts are broken."""

    error_code = "CONTRACT_ERROR"


class DataQualityError(ContractError):
    """Raised when an assembled collection fails a quality gate."""

    error_code = "DATA_QUALITY_ERROR"

    def __init__(self, message: str, report=None) -> None:
        super().__init__(message)
        self.report = report


class StageError(PipelineError):
    """Raised for stage failures that halt the run."""

    error_code = "STAGE_ERROR"
