import traceback
from core.security import mask_phi, redact_log
from logger import logger


class AppError(Exception):
    """
    Standardized application error that carries a code and user-facing message.
    """
    def __init__(self, code: str, message: str, details: str = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or ""

    def __str__(self):
        return f"[{self.code}] {self.message}"


class InvalidAnchorError(AppError):
    """
    Raised when a source anchor carries no locating field (Bates, page,
    exhibit or document id). The chip renderer never emits an empty chip.
    """
    def __init__(self, message: str = "Source anchor has no Bates, page, exhibit or document reference.",
                 details: str = None):
        super().__init__("ANCHOR_INVALID_001", message, details)


class InvalidBatesRangeError(AppError):
    def __init__(self, message: str, details: str = None):
        super().__init__("BATES_RANGE_001", message, details)


def _format_context(context: dict = None) -> str:
    return f" ctx={context}" if context else ""


def handle_error(e: Exception, code: str = "GENERIC_000", user_message: str = None,
                 raise_it: bool = False, context: dict = None):
    """
    Centralized error handler.

    Logs the masked exception and traceback under `code`. Returns a
    user-facing message, or raises AppError when `raise_it` is set.
    """
    error_str = mask_phi(redact_log(str(e)))
    tb_str = mask_phi(redact_log(traceback.format_exc()))

    logger.error(
        f"[{code}] ❌ Error{_format_context(context)}\n"
        f"→ Exception: {error_str}\n"
        f"→ Traceback: {tb_str}"
    )

    user_friendly = user_message or "An unexpected error occurred. Please contact support."
    user_friendly = f"❌ {user_friendly} (Error Code: {code})"

    if raise_it:
        if isinstance(e, AppError):
            raise e
        raise AppError(code=code, message=user_friendly, details=error_str) from e

    return user_friendly


def log_warning(msg: str, code: str = "GENERIC_WARN", context: dict = None):
    msg = mask_phi(redact_log(msg))
    logger.warning(f"[{code}] ⚠️ Warning{_format_context(context)}: {msg}")


def log_info(msg: str, code: str = "GENERIC_INFO", context: dict = None):
    msg = mask_phi(redact_log(msg))
    logger.info(f"[{code}] ℹ️ Info{_format_context(context)}: {msg}")
