"""
Error categorization for attempt logs and notifications.

Errors arrive either as exceptions (provider calls, git operations) or as the
error text recorded on a failover attempt. Exception types are checked first;
text is matched against an ordered keyword table.
"""

import asyncio
from enum import Enum
from typing import Tuple

import httpx

from ..llm.provider import ProviderError
from ..repository.file_operations import GitOperationError


class ErrorCategory(Enum):
    """Categories of errors that can occur during a pipeline run"""
    CONFIGURATION = "configuration"
    AUTH = "authentication"
    API = "api"
    TIMEOUT = "timeout"
    NETWORK = "network"
    VALIDATION = "validation"
    GIT = "git"
    INTERNAL = "internal"


EXPLANATIONS = {
    ErrorCategory.CONFIGURATION: "No usable provider configuration",
    ErrorCategory.AUTH: "The provider rejected the credentials",
    ErrorCategory.API: "The provider returned an error response",
    ErrorCategory.TIMEOUT: "The provider did not answer in time",
    ErrorCategory.NETWORK: "The provider could not be reached",
    ErrorCategory.VALIDATION: "The provider returned text that is not a conventional commit message",
    ErrorCategory.GIT: "Git operation failed",
    ErrorCategory.INTERNAL: "An unexpected error occurred",
}

# First match wins
KEYWORDS = [
    (ErrorCategory.CONFIGURATION, ("no ai provider", "api key", "not configured")),
    (ErrorCategory.AUTH, ("401", "403", "unauthorized", "forbidden", "authentication")),
    (ErrorCategory.TIMEOUT, ("timeout", "timed out")),
    (ErrorCategory.NETWORK, ("connection", "network", "unreachable", "name resolution")),
    (ErrorCategory.VALIDATION, ("invalid message format", "empty response")),
    (ErrorCategory.API, ("api error", "429", "rate limit", "invalid response", "no candidates")),
    (ErrorCategory.GIT, ("push", "pull", "merge", "commit failed", "git ")),
]

AUTH_STATUS_CODES = (401, 403)


def _categorize_exception(error: BaseException):
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(error, httpx.TransportError):
        return ErrorCategory.NETWORK
    if isinstance(error, ProviderError) and error.status_code is not None:
        if error.status_code in AUTH_STATUS_CODES:
            return ErrorCategory.AUTH
        return ErrorCategory.API
    if isinstance(error, GitOperationError):
        return ErrorCategory.GIT
    return None


def categorize_error(error) -> Tuple[ErrorCategory, str]:
    """
    Categorize an error and provide a short explanation.

    Args:
        error: An exception, or the error text recorded on an attempt

    Returns:
        Tuple of (ErrorCategory, explanation)
    """
    category = None
    if isinstance(error, BaseException):
        category = _categorize_exception(error)

    if category is None:
        text = str(error).lower()
        for candidate, keywords in KEYWORDS:
            if any(keyword in text for keyword in keywords):
                category = candidate
                break
        else:
            category = ErrorCategory.INTERNAL

    return category, EXPLANATIONS[category]
