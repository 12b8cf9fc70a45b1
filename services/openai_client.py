import asyncio
import time

from openai import AsyncOpenAI, OpenAIError

from config import AppConfig, get_config
from core.error_handling import AppError, handle_error
from core.security import mask_phi, redact_log
from logger import log_metric, logger
from utils.retry_utils import openai_retry

DEFAULT_MODEL = "gpt-4o"
DEFAULT_SYSTEM_MSG = (
    "You are an experienced personal injury attorney drafting one section of a settlement "
    "demand letter. Write clear, factual, persuasive prose."
)


class DraftingClient:
    """
    Drafting collaborator: `draft(instructions) -> str`.

    Each attempt is bounded by DRAFTING_TIMEOUT_SECONDS and retried up to
    DRAFTING_MAX_ATTEMPTS times in total. Every failure surfaces as AppError;
    callers decide what fallback text to use.
    """

    def __init__(self, config: AppConfig = None, client: AsyncOpenAI = None, retry_wait=None):
        self.config = config or get_config()
        self.model = getattr(self.config, "OPENAI_MODEL", None) or DEFAULT_MODEL
        self.retry_wait = retry_wait
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.OPENAI_API_KEY:
                raise AppError(
                    code="OPENAI_GEN_005",
                    message="OpenAI API key is not configured.",
                    details="Set OPENAI_API_KEY to enable section drafting.",
                )
            self._client = AsyncOpenAI(api_key=self.config.OPENAI_API_KEY)
        return self._client

    async def _complete(self, instructions: str, system_msg: str) -> str:
        start_time = time.time()
        response = await asyncio.wait_for(
            self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_msg},
                    {"role": "user", "content": instructions},
                ],
                temperature=self.config.DRAFTING_TEMPERATURE,
            ),
            timeout=self.config.DRAFTING_TIMEOUT_SECONDS,
        )
        latency = time.time() - start_time
        log_metric("drafting_latency_seconds", round(latency, 3), {"model": self.model})

        choices = getattr(response, "choices", None) or []
        if not choices or not getattr(choices[0], "message", None):
            raise AppError(
                code="OPENAI_GEN_001",
                message="OpenAI returned no completions.",
                details=f"Model={self.model}, Prompt length={len(instructions)}",
            )
        return (choices[0].message.content or "").strip()

    async def draft(self, instructions: str, system_msg: str = DEFAULT_SYSTEM_MSG) -> str:
        if not instructions or not isinstance(instructions, str):
            raise AppError(
                code="OPENAI_GEN_004",
                message="Prompt for text generation is empty or invalid.",
            )

        call = openai_retry(
            self._complete,
            attempts=self.config.DRAFTING_MAX_ATTEMPTS,
            wait=self.retry_wait,
        )
        try:
            return await call(instructions, system_msg)
        except AppError:
            raise
        except (OpenAIError, asyncio.TimeoutError) as e:
            handle_error(
                e,
                code="OPENAI_GEN_002",
                user_message="Drafting service unavailable.",
                raise_it=True,
            )
        except Exception as e:
            logger.error(redact_log(mask_phi(f"[OPENAI_GEN] Unexpected drafting error: {e}")))
            handle_error(
                e,
                code="OPENAI_GEN_003",
                user_message="Unexpected error during text generation.",
                raise_it=True,
            )
