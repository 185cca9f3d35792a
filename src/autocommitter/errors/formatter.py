"""
Error and attempt-log formatting for user-facing notifications.
"""

import logging
from typing import Sequence

from .categories import ErrorCategory, categorize_error

logger = logging.getLogger(__name__)


class ErrorFormatter:
    """
    Formats errors and failover attempt logs into user-facing text.
    """

    # Suggestions for each error category
    SUGGESTIONS = {
        ErrorCategory.CONFIGURATION: [
            "Set AUTOCOMMITTER_PRIMARY_PROVIDER to one of the supported providers",
            "Check your `.env` file for missing or incorrect API keys",
        ],
        ErrorCategory.AUTH: [
            "Check that your provider API key is valid",
            "Ensure your API keys haven't expired",
        ],
        ErrorCategory.TIMEOUT: [
            "Increase AUTOCOMMITTER_PROVIDER_TIMEOUT or set it to 0",
            "Check if the model or API service is responding",
        ],
        ErrorCategory.NETWORK: [
            "Check your internet connection",
            "For Ollama: verify OLLAMA_BASE_URL points at a running server",
        ],
        ErrorCategory.API: [
            "Check the provider status page for outages",
            "Configure a backup provider for automatic failover",
        ],
        ErrorCategory.VALIDATION: [
            "Try a different model; smaller models often ignore the commit format",
        ],
        ErrorCategory.GIT: [
            "Pull and resolve conflicts manually, then the next run will push",
        ],
        ErrorCategory.INTERNAL: [
            "Check the server logs for more details",
        ],
    }

    @staticmethod
    def format_attempt_details(attempts: Sequence) -> str:
        """
        Render a failover attempt log.

        Args:
            attempts: FailoverAttempt entries in the order they were made

        Returns:
            Multi-line report, one block per attempt
        """
        if not attempts:
            return "AI Failover Details:\n\nNo provider was attempted."

        blocks = []
        for index, attempt in enumerate(attempts, 1):
            status = "✓ Success" if attempt.success else "✗ Failed"
            if attempt.error:
                category, _ = categorize_error(attempt.error)
                detail = f"Error ({category.value}): {attempt.error}"
            else:
                detail = f"Message: {attempt.message_preview}"
            blocks.append(
                f"Attempt {index}: {attempt.label}\n"
                f"  Model: {attempt.model}\n"
                f"  Status: {status}\n"
                f"  {detail}"
            )

        return "AI Failover Details:\n\n" + "\n\n".join(blocks)

    @staticmethod
    def format_error_concise(error) -> str:
        """
        Format an error concisely for logs or inline display.

        Args:
            error: The exception to format

        Returns:
            Concise error string with the first suggestion
        """
        category, explanation = categorize_error(error)
        suggestions = ErrorFormatter.SUGGESTIONS.get(category, [])

        text = f"{category.value.upper()}: {explanation} - {str(error)[:200]}"
        if suggestions:
            text += f" ({suggestions[0]})"
        return text
