"""Custom exception classes for stream-ingestion.

This module provides specific exception types for better error handling and debugging.
"""

from typing import Any, Dict, Optional


class IngestionError(Exception):
    """Base exception for all stream-ingestion errors."""

    error_code: str = "ERR000"  # Override in subclasses

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        """
        Initialize stream-ingestion exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
            error_code: Optional error code override
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def __str__(self) -> str:
        """Return string representation with error code and details."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


class ConfigurationError(IngestionError):
    """Raised when an ingestion run or job config is invalid.

    Examples:
        - Missing source or sink
        - Sink missing accept/finalize/abort
        - Unknown sink or source type
        - Invalid YAML job file
    """

    error_code = "CFG001"

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        key: Optional[str] = None,
    ):
        """
        Initialize configuration error.

        Args:
            message: Description of validation failure
            config_path: Path to job file that failed validation
            key: Specific parameter or configuration key that caused the error
        """
        details = {}
        if config_path:
            details["config_path"] = config_path
        if key:
            details["config_key"] = key
        super().__init__(message, details)


class SourceError(IngestionError):
    """Raised when pulling a chunk from a source fails.

    Examples:
        - File read errors
        - Pull after the source was released
        - Source produced something that is not bytes
    """

    error_code = "SRC001"

    def __init__(
        self,
        message: str,
        source_type: Optional[str] = None,
        location: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        """
        Initialize source error.

        Args:
            message: Description of source failure
            source_type: Source type (file, iterable)
            location: Path or identifier of the data being read
            original_error: Original exception that caused this error
        """
        details: Dict[str, Any] = {}
        if source_type:
            details["source_type"] = source_type
        if location:
            details["location"] = location
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__

        super().__init__(message, details)
        self.original_error = original_error


class SinkError(IngestionError):
    """Raised when delivering a chunk or finalizing a sink fails.

    Examples:
        - Local filesystem write errors
        - S3 part upload failures
        - Sink capacity exceeded
        - accept() after finalize() or abort()
    """

    error_code = "SNK001"

    def __init__(
        self,
        message: str,
        sink_type: Optional[str] = None,
        operation: Optional[str] = None,
        location: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        """
        Initialize sink error.

        Args:
            message: Description of sink failure
            sink_type: Sink type (file, memory, slow, s3)
            operation: Operation that failed (accept, finalize, abort)
            location: Destination path or URI
            original_error: Original exception that caused this error
        """
        details: Dict[str, Any] = {}
        if sink_type:
            details["sink_type"] = sink_type
        if operation:
            details["operation"] = operation
        if location:
            details["location"] = location
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__

        super().__init__(message, details)
        self.original_error = original_error


class AbortError(IngestionError):
    """Raised by a sink's own abort() while handling another failure.

    Never surfaces as the primary error of a run: the orchestrator logs it
    and re-raises the error that triggered the abort.
    """

    error_code = "ABT001"

    def __init__(
        self,
        message: str,
        primary_error: Optional[BaseException] = None,
        original_error: Optional[BaseException] = None,
    ):
        """
        Initialize abort error.

        Args:
            message: Description of abort failure
            primary_error: Error that caused the run to abort
            original_error: Exception raised by the sink's abort()
        """
        details: Dict[str, Any] = {}
        if primary_error:
            details["primary_error"] = str(primary_error)
            details["primary_error_type"] = type(primary_error).__name__
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__

        super().__init__(message, details)
        self.primary_error = primary_error
        self.original_error = original_error
