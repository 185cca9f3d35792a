"""Tests for error categorization and attempt-log formatting."""

import httpx
import pytest

from autocommitter.commit.failover import FailoverAttempt
from autocommitter.errors import ErrorCategory, ErrorFormatter, categorize_error
from autocommitter.llm.provider import ProviderError, ProviderId
from autocommitter.repository.file_operations import GitOperationError, PushRejectedError


class TestCategorizeError:
    @pytest.mark.parametrize("error, category", [
        (httpx.ReadTimeout("read timed out"), ErrorCategory.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorCategory.NETWORK),
        (ProviderError(ProviderId.OPENAI, "OpenAI API error: 401", status_code=401), ErrorCategory.AUTH),
        (ProviderError(ProviderId.OPENAI, "OpenAI API error: 500", status_code=500), ErrorCategory.API),
        (PushRejectedError("remote branch has new commits"), ErrorCategory.GIT),
        (GitOperationError("index.lock exists"), ErrorCategory.GIT),
    ])
    def test_exception_types(self, error, category):
        assert categorize_error(error)[0] is category

    @pytest.mark.parametrize("text, category", [
        ("No AI provider configured", ErrorCategory.CONFIGURATION),
        ("Gemini API error: 403 forbidden", ErrorCategory.AUTH),
        ("Request timed out after 30s", ErrorCategory.TIMEOUT),
        ("Connection reset by peer", ErrorCategory.NETWORK),
        ("Invalid message format: missing 'type: ' prefix", ErrorCategory.VALIDATION),
        ("Empty response", ErrorCategory.VALIDATION),
        ("OpenRouter API error: 429", ErrorCategory.API),
        ("Pull failed: no tracking information", ErrorCategory.GIT),
        ("boom", ErrorCategory.INTERNAL),
    ])
    def test_recorded_error_text(self, text, category):
        assert categorize_error(text)[0] is category

    def test_status_free_provider_error_uses_text(self):
        error = ProviderError(ProviderId.GEMINI, "Gemini returned no candidates")

        assert categorize_error(error)[0] is ErrorCategory.API

    def test_explanation_returned(self):
        category, explanation = categorize_error("Empty response")

        assert category is ErrorCategory.VALIDATION
        assert "conventional commit" in explanation


class TestFormatAttemptDetails:
    def test_blocks_per_attempt(self):
        attempts = [
            FailoverAttempt(ProviderId.GEMINI, "gemini-2.0-flash", False, error="Gemini API error: 503"),
            FailoverAttempt(ProviderId.OPENROUTER, "free-model", False, error="Empty response"),
            FailoverAttempt(ProviderId.GEMINI, "gemini-2.0-flash", True,
                            message_preview="fix: correct off-by-one in pagination", simplified=True),
        ]

        details = ErrorFormatter.format_attempt_details(attempts)

        assert details.startswith("AI Failover Details:\n\n")
        assert "Attempt 1: Gemini\n  Model: gemini-2.0-flash\n  Status: ✗ Failed\n  Error (api): Gemini API error: 503" in details
        assert "Error (validation): Empty response" in details
        assert "Attempt 3: Gemini (Simplified)" in details
        assert "Status: ✓ Success\n  Message: fix: correct off-by-one in pagination" in details

    def test_no_attempts(self):
        assert ErrorFormatter.format_attempt_details([]).endswith("No provider was attempted.")


class TestFormatErrorConcise:
    def test_includes_category_and_suggestion(self):
        text = ErrorFormatter.format_error_concise(
            ProviderError(ProviderId.ANTHROPIC, "Anthropic API error: 401", status_code=401)
        )

        assert text.startswith("AUTHENTICATION:")
        assert "Anthropic API error: 401" in text
        assert ErrorFormatter.SUGGESTIONS[ErrorCategory.AUTH][0] in text

    def test_long_errors_truncated(self):
        text = ErrorFormatter.format_error_concise(RuntimeError("x" * 500))

        assert "x" * 200 in text
        assert "x" * 201 not in text
