"""
Custom exception classes for the Viz Playground engine.
These allow us to differentiate between user errors (4xx) and system errors (5xx).
"""

class AppException(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class FileProcessingError(AppException):
    """Raised when an import fails."""
    def __init__(self, message: str = "Failed to process the uploaded file."):
        super().__init__(message, status_code=400)

class UnsupportedFormatError(FileProcessingError):
    """Raised when the file type is neither CSV nor JSON."""
    def __init__(self, message: str = "Unsupported file format. Please upload CSV or JSON files."):
        super().__init__(message)

class MalformedContentError(FileProcessingError):
    """Raised when CSV/JSON content cannot be parsed into records."""
    def __init__(self, message: str = "The file content could not be parsed."):
        super().__init__(message)

class EmptyDatasetError(FileProcessingError):
    """Raised when an import parses but yields no rows."""
    def __init__(self, message: str = "The dataset contains no rows."):
        super().__init__(message)

class InvalidDatasetError(AppException):
    """Raised when rows handed to the engine are not a non-empty array of records."""
    def __init__(self, message: str = "Expected a non-empty array of records."):
        super().__init__(message, status_code=400)

class InvalidQueryError(AppException):
    """Raised when a filter, grouping or chart configuration is invalid."""
    def __init__(self, message: str = "The query is invalid or incomplete."):
        super().__init__(message, status_code=400)

class ExpressionError(AppException):
    """Raised when a computed-field expression is rejected or fails to evaluate."""
    def __init__(self, message: str = "Failed to evaluate the expression."):
        super().__init__(message, status_code=400)

class VisualizationError(AppException):
    """Raised when plot generation fails."""
    def __init__(self, message: str = "Failed to generate visualization."):
        super().__init__(message, status_code=500)

class DatasetNotFoundError(AppException):
    """Raised when a dataset id is not present in the session store."""
    def __init__(self, message: str = "Dataset not found. Please import data first."):
        super().__init__(message, status_code=404)
