"""
Language model capability used by the summarization strategies.
"""

from typing import Optional, Protocol

import httpx
from langchain.chat_models import init_chat_model

from transcript_summarizer.config import config
from transcript_summarizer.utils.error_handling import ModelFailure
from transcript_summarizer.utils.logger import logging


class LanguageModel(Protocol):
    """Anything that turns a prompt into generated text."""

    def generate(self, prompt: str) -> str:
        ...


class OllamaLanguageModel:
    """Language model backed by a locally hosted Ollama server."""

    # The Ollama HTTP client can serve several requests at once.
    concurrent_safe = True

    def __init__(
        self,
        model: str = config.DEFAULT_SUMMARY_MODEL,
        base_url: str = config.OLLAMA_BASE_URL,
        temperature: float = config.TEMPERATURE,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the model client.

        Args:
            model: Ollama model name, installed locally with `ollama pull`
            base_url: Address of the Ollama server
            temperature: Sampling temperature
            timeout: Optional per-request timeout in seconds
        """
        self.model = model
        self.base_url = base_url
        client_kwargs = {"timeout": timeout} if timeout is not None else {}
        self.llm = init_chat_model(
            model=model,
            model_provider="ollama",
            base_url=base_url,
            temperature=temperature,
            client_kwargs=client_kwargs,
        )

    def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Raises:
            ModelFailure: If the server cannot be reached, times out, errors
                or returns no text
        """
        logging.debug(f"Calling {self.model} at {self.base_url} with a {len(prompt)} character prompt")
        try:
            response = self.llm.invoke(prompt)
        except httpx.ConnectError as e:
            raise ModelFailure(
                f"Could not reach Ollama at {self.base_url}: {e}",
                kind=ModelFailure.UNREACHABLE,
            ) from e
        except httpx.TimeoutException as e:
            raise ModelFailure(
                f"Request to {self.model} timed out: {e}",
                kind=ModelFailure.TIMEOUT,
            ) from e
        except Exception as e:
            raise ModelFailure(
                f"Model {self.model} failed: {e}",
                kind=ModelFailure.MODEL_ERROR,
            ) from e

        content = getattr(response, "content", response)
        if not isinstance(content, str) or not content.strip():
            raise ModelFailure(
                f"Model {self.model} returned an empty response",
                kind=ModelFailure.MODEL_ERROR,
            )
        return content
