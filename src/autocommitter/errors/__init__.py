"""
Error handling and formatting for autocommitter.
"""

from .formatter import ErrorFormatter
from .categories import ErrorCategory, categorize_error

__all__ = ["ErrorFormatter", "ErrorCategory", "categorize_error"]
