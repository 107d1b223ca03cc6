"""Core types shared by every layer."""

from .errors import ErrorCode, error_code_for_kind
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # errors
    "ErrorCode",
    "error_code_for_kind",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
