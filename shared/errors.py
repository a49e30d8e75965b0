"""
Shared error handling for the aggregator routing stage.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error payload."""
    
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class PipelineException(Exception):
    """Base exception for the metric pipeline."""
    
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
    
    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class MetricConstructionError(PipelineException):
    """Raised when a metric cannot be built from its parts."""
    
    def __init__(self, message: str = "Invalid metric", details: Optional[Dict[str, Any]] = None):
        super().__init__("METRIC_CONSTRUCTION_ERROR", message, details)


class ConfigurationError(PipelineException):
    """Configuration-related errors."""
    
    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
