import asyncio
from functools import wraps

from openai import OpenAIError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.error_handling import handle_error

RETRYABLE_ERRORS = (OpenAIError, asyncio.TimeoutError)


def openai_retry(func=None, *, attempts: int = 3, wait=None):
    """
    Decorator that retries async OpenAI calls on OpenAIError or timeout.

    Use bare (`@openai_retry`, 3 attempts) or with arguments
    (`openai_retry(attempts=2, wait=wait_none())(fn)`).
    """
    def decorator(fn):
        @wraps(fn)
        @retry(
            reraise=True,
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait or wait_exponential(multiplier=2, min=2, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS)
        )
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except RETRYABLE_ERRORS as e:
                handle_error(e, "OPENAI_RETRY_FAIL")
                raise
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
