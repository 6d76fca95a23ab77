#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the diffview library.

This module defines specialized exception classes for the error conditions
that can occur while computing line diffs. Only input contract violations and
background computation failures ever reach the caller; structured-data parse
failures are recovered inside the library by falling back to line-mode diffs.

Exception Hierarchy
-------------------
- DiffViewError (base exception)

  - ValidationError (parameter/input validation)
    - TextInputRequiredError (structured values under a text-only compare mode)

  - ParsingError (malformed JSON/YAML text, recovered internally)

  - ComputationError (background computation failures)

"""

from typing import Any


class DiffViewError(Exception):
    """Base exception class for all diffview-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(DiffViewError):
    """Exception raised for invalid input values or parameters.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    parameter_name : str or None
        The name of the problematic parameter
    parameter_value : any
        The value that caused the error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class TextInputRequiredError(ValidationError):
    """Exception raised when structured values reach a text-only compare mode.

    Custom comparators receive two strings, so they cannot be used when either
    input is a parsed (tree-shaped) value.

    Parameters
    ----------
    compare_mode : any
        The compare mode that requires text input
    message : str, optional
        Custom error message. If not provided, a standard message is used

    """

    def __init__(self, compare_mode: Any, message: str | None = None):
        """Initialize the error for the offending compare mode."""
        if message is None:
            name = getattr(compare_mode, "__qualname__", None) or repr(compare_mode)
            message = f"Both values must be text for this compare mode ({name})"
        super().__init__(message, parameter_name="compare_mode", parameter_value=compare_mode)


class ParsingError(DiffViewError):
    """Exception raised when structured text cannot be parsed.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    data_format : str, optional
        The structured format that failed to parse ("json" or "yaml")
    original_error : Exception, optional
        The underlying parser exception

    Attributes
    ----------
    data_format : str or None
        Which format the text was being parsed as

    """

    def __init__(self, message: str, data_format: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.data_format = data_format


class ComputationError(DiffViewError):
    """Exception raised when a background diff computation fails unexpectedly.

    The computation is pure, so resubmitting the same request is always safe.

    Parameters
    ----------
    message : str
        Description of the failure
    request_id : int, optional
        Identifier of the request whose computation failed
    error_type : str, optional
        Class name of the exception raised inside the computation
    original_error : Exception, optional
        The original exception, when it is available in this process

    """

    def __init__(
        self,
        message: str,
        request_id: int | None = None,
        error_type: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the computation error."""
        super().__init__(message, original_error)
        self.request_id = request_id
        self.error_type = error_type


__all__ = [
    "DiffViewError",
    "ValidationError",
    "TextInputRequiredError",
    "ParsingError",
    "ComputationError",
]
