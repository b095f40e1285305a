import time
from abc import ABC, abstractmethod

from fastapi.concurrency import run_in_threadpool
from openai import OpenAI, OpenAIError

from core.config import settings
from core.exceptions import ExternalServiceError
from core.logger import external_logger

SYSTEM_PROMPT = "You are an expert botanist helping people take care of their house plants."


class TextGenerator(ABC):
    """
    Opaque text generation service.

    complete() returns the raw text of the answer. With expect_json=True the
    caller asks for a JSON document and parses it itself; a generator never
    retries and raises ExternalServiceError when the call fails.
    """

    @abstractmethod
    async def complete(self, prompt: str, expect_json: bool = False) -> str:
        ...


class OpenAITextGenerator(TextGenerator):
    service_name = "text-generation"

    def __init__(self, client: OpenAI | None = None, model: str = settings.OPENAI_MODEL):
        self._client = client
        self.model = model

    def _get_client(self) -> OpenAI:
        # built on first use, a missing key only fails the calls that need it
        if self._client is None:
            self._client = OpenAI(
                api_key=settings.OPENAI_API_KEY or None,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.HTTP_TIMEOUT_SECONDS * 3,
                max_retries=0,
            )
        return self._client

    async def complete(self, prompt: str, expect_json: bool = False) -> str:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7,
            "max_tokens": 2048 if expect_json else 200,
        }
        if expect_json:
            kwargs["response_format"] = {"type": "json_object"}

        external_logger.log_request(self.service_name, self.model, {"expect_json": expect_json})
        started = time.monotonic()
        try:
            client = self._get_client()
            response = await run_in_threadpool(client.chat.completions.create, **kwargs)
        except OpenAIError as e:
            external_logger.log_error(self.service_name, e)
            raise ExternalServiceError(self.service_name, details={"reason": str(e)})
        external_logger.log_response(self.service_name, "ok", (time.monotonic() - started) * 1000)

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExternalServiceError(self.service_name, "Text generation returned an empty answer")
        return content


_default_generator: TextGenerator | None = None


def get_text_generator() -> TextGenerator:
    global _default_generator
    if _default_generator is None:
        _default_generator = OpenAITextGenerator()
    return _default_generator
