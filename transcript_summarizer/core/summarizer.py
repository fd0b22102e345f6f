"""
Module for summarizing transcript chunks using LLM models.

Three strategies share one contract, ``summarize(chunks, model)``:

* Stuff puts every chunk into a single prompt (one model call).
* Map-Reduce summarizes every chunk on its own, then combines the partial
  summaries (N + 1 calls).
* Refine walks the chunks in order and keeps improving a running summary
  (N calls, strictly sequential).
"""

import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from transcript_summarizer.core.language_model import LanguageModel
from transcript_summarizer.core.prompts import SUMMARY_PROMPT, COMBINE_PROMPT, REFINE_PROMPT
from transcript_summarizer.models.schemas import Document, SummaryResult, SummaryStrategy
from transcript_summarizer.utils.error_handling import (
    ContextOverflow,
    InvalidConfiguration,
    ModelFailure,
)
from transcript_summarizer.utils.helpers import Deadline
from transcript_summarizer.utils.logger import logging


class Summarizer(ABC):
    """Turns an ordered sequence of chunks into one summary."""

    strategy: SummaryStrategy

    def __init__(self, deadline: Optional[Deadline] = None):
        self.deadline = deadline or Deadline()

    def summarize(self, chunks: Sequence[Document], model: LanguageModel) -> str:
        """Summarize the chunks and return only the final text."""
        return self.run(chunks, model).text

    def run(self, chunks: Sequence[Document], model: LanguageModel) -> SummaryResult:
        """Summarize the chunks, keeping the intermediate summaries."""
        if not chunks:
            raise InvalidConfiguration("Nothing to summarize: the chunk sequence is empty", operation="summarize")
        logging.info(f"Summarizing {len(chunks)} chunks with the {self.strategy.value} strategy")
        return self._run(list(chunks), model)

    @abstractmethod
    def _run(self, chunks: List[Document], model: LanguageModel) -> SummaryResult:
        ...

    def _generate(self, model: LanguageModel, prompt: str) -> str:
        self.deadline.check()
        output = model.generate(prompt)
        if not isinstance(output, str) or not output.strip():
            raise ModelFailure("Model returned an empty or non-text response", kind=ModelFailure.MODEL_ERROR)
        return output


class StuffSummarizer(Summarizer):
    """Summarize everything with a single prompt."""

    strategy = SummaryStrategy.STUFF

    def __init__(self, max_prompt_chars: int = 16000, deadline: Optional[Deadline] = None):
        super().__init__(deadline)
        self.max_prompt_chars = max_prompt_chars

    def _run(self, chunks: List[Document], model: LanguageModel) -> SummaryResult:
        text = "\n\n".join(chunk.text for chunk in chunks)
        prompt = SUMMARY_PROMPT.format(text=text)
        if len(prompt) > self.max_prompt_chars:
            raise ContextOverflow(
                f"Stuffed prompt has {len(prompt)} characters, "
                f"more than the {self.max_prompt_chars} the model accepts"
            )
        summary = self._generate(model, prompt)
        return SummaryResult(text=summary, strategy=self.strategy, call_count=1)


class MapReduceSummarizer(Summarizer):
    """Summarize each chunk, then combine the partial summaries."""

    strategy = SummaryStrategy.MAP_REDUCE

    def __init__(self, max_concurrency: int = 1, deadline: Optional[Deadline] = None):
        super().__init__(deadline)
        if max_concurrency < 1:
            raise InvalidConfiguration(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency

    def _run(self, chunks: List[Document], model: LanguageModel) -> SummaryResult:
        # Models that are not safe for concurrent use get one call at a time.
        if getattr(model, "concurrent_safe", False):
            gate = threading.Semaphore(self.max_concurrency)
        else:
            gate = threading.Semaphore(1)

        def map_chunk(chunk: Document) -> str:
            with gate:
                return self._generate(model, SUMMARY_PROMPT.format(text=chunk.text))

        if self.max_concurrency == 1 or len(chunks) == 1:
            partial_summaries = [map_chunk(chunk) for chunk in chunks]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_concurrency, len(chunks))) as executor:
                # executor.map yields in submission order, i.e. chunk order
                partial_summaries = list(executor.map(map_chunk, chunks))

        logging.info(f"Combining {len(partial_summaries)} partial summaries")
        combined = self._generate(model, COMBINE_PROMPT.format(text="\n\n".join(partial_summaries)))
        return SummaryResult(
            text=combined,
            strategy=self.strategy,
            intermediate_steps=partial_summaries,
            call_count=len(chunks) + 1,
        )


class RefineSummarizer(Summarizer):
    """Build a running summary chunk by chunk."""

    strategy = SummaryStrategy.REFINE

    def _run(self, chunks: List[Document], model: LanguageModel) -> SummaryResult:
        running_summary = self._generate(model, SUMMARY_PROMPT.format(text=chunks[0].text))
        steps = [running_summary]
        for i, chunk in enumerate(chunks[1:], start=1):
            prompt = REFINE_PROMPT.format(existing_answer=running_summary, text=chunk.text)
            running_summary = self._generate(model, prompt)
            steps.append(running_summary)
            logging.debug(f"Refined summary after chunk {i + 1}/{len(chunks)}: {len(running_summary)} characters")

        return SummaryResult(
            text=running_summary,
            strategy=self.strategy,
            intermediate_steps=steps,
            call_count=len(chunks),
        )


def get_summarizer(
    strategy: SummaryStrategy,
    max_prompt_chars: int = 16000,
    max_concurrency: int = 1,
    deadline: Optional[Deadline] = None,
) -> Summarizer:
    """
    Create the summarizer for a strategy.

    Args:
        strategy: Which combination policy to use
        max_prompt_chars: Largest prompt the Stuff strategy may send
        max_concurrency: Parallel map calls allowed for Map-Reduce
        deadline: Run deadline checked before every model call

    Returns:
        Summarizer implementing the strategy
    """
    try:
        strategy = SummaryStrategy(strategy)
    except ValueError as e:
        choices = ", ".join(s.value for s in SummaryStrategy)
        raise InvalidConfiguration(f"Unknown summarization strategy {strategy!r}; expected one of {choices}") from e

    if strategy == SummaryStrategy.STUFF:
        return StuffSummarizer(max_prompt_chars=max_prompt_chars, deadline=deadline)
    if strategy == SummaryStrategy.MAP_REDUCE:
        return MapReduceSummarizer(max_concurrency=max_concurrency, deadline=deadline)
    return RefineSummarizer(deadline=deadline)
