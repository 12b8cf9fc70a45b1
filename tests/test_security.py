from unittest.mock import patch

import pytest

from core.error_handling import AppError, handle_error, log_warning
from core.security import mask_phi, redact_log, safe_log_text


def test_redact_log_sensitive():
    text = "apiKey=12345"
    result = redact_log(text)
    assert "***REDACTED***" in result


def test_redact_log_openai_key():
    assert "sk-abc123" not in redact_log("using sk-abc123 for drafting")


def test_mask_phi_fields():
    sample = "client: John Doe, email: test@example.com"
    masked = mask_phi(sample)
    assert "[REDACTED]" in masked
    assert "John Doe" not in masked
    assert "test@example.com" not in masked


def test_mask_phi_chronology():
    masked = mask_phi("chronology_summary=ER visit for neck pain\nsection=treatment")
    assert "neck pain" not in masked
    assert "section=treatment" in masked


def test_safe_log_text_non_string():
    assert safe_log_text(1234) == "1234"


def test_handle_error_returns_user_message():
    with patch("core.error_handling.logger") as mock_logger:
        message = handle_error(ValueError("plaintiff: Maria Lopez"), "TEST_001", "Could not build demand.")

    assert message == "❌ Could not build demand. (Error Code: TEST_001)"
    logged = mock_logger.error.call_args[0][0]
    assert "[TEST_001]" in logged
    assert "Maria Lopez" not in logged


def test_handle_error_raises_app_error():
    with pytest.raises(AppError) as exc:
        handle_error(ValueError("boom"), "TEST_002", raise_it=True)
    assert exc.value.code == "TEST_002"
    assert isinstance(exc.value.__cause__, ValueError)


def test_handle_error_reraises_app_error_unchanged():
    original = AppError("ORIGINAL_001", "original")
    with pytest.raises(AppError) as exc:
        handle_error(original, "WRAPPER_001", raise_it=True)
    assert exc.value is original


def test_log_warning_masks_phi():
    with patch("core.error_handling.logger") as mock_logger:
        log_warning("claimant: Maria Lopez missing deadline", code="TEST_WARN")
    logged = mock_logger.warning.call_args[0][0]
    assert logged.startswith("[TEST_WARN] ⚠️ Warning")
    assert "Maria Lopez" not in logged
