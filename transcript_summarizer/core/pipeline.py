"""
Pipeline driver: fetch -> chunk -> summarize.

Each stage either computes its output and persists it as an artifact, or
loads the artifact a previous run left behind. Artifacts are written only when
their stage succeeds, so a failed run can be resumed by toggling the stage
switches.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from transcript_summarizer.config import config as app_config
from transcript_summarizer.core.chunker import RecursiveTextChunker
from transcript_summarizer.core.language_model import LanguageModel, OllamaLanguageModel
from transcript_summarizer.core.summarizer import get_summarizer
from transcript_summarizer.core.transcript_loader import YouTubeTranscriptLoader
from transcript_summarizer.models.schemas import (
    Document,
    PipelineConfig,
    PipelineResult,
    SummaryResult,
)
from transcript_summarizer.utils.error_handling import ArtifactFailure, PipelineError
from transcript_summarizer.utils.helpers import Deadline, load_json, save_json
from transcript_summarizer.utils.logger import logging

FETCH = "fetch"
CHUNK = "chunk"
SUMMARIZE = "summarize"


class SummarizationPipeline:
    """Runs one summarization job described by a PipelineConfig."""

    def __init__(self, config: PipelineConfig, source=None, model: Optional[LanguageModel] = None):
        """
        Initialize the pipeline.

        Args:
            config: Job configuration
            source: Transcript source with a ``load(url, language=..., include_metadata=...)``
                method; a YouTubeTranscriptLoader is created when fetching if omitted
            model: Language model with a ``generate(prompt)`` method; an
                OllamaLanguageModel is created when summarizing if omitted
        """
        self.config = config
        self._source = source
        self._model = model
        self.artifacts_dir = Path(config.artifacts_dir)

    @property
    def fetch_path(self) -> Path:
        return self.artifacts_dir / app_config.FETCH_ARTIFACT

    @property
    def split_path(self) -> Path:
        return self.artifacts_dir / app_config.SPLIT_ARTIFACT

    @property
    def summary_path(self) -> Path:
        return self.artifacts_dir / app_config.SUMMARY_ARTIFACT

    @property
    def intermediate_path(self) -> Path:
        return self.artifacts_dir / app_config.INTERMEDIATE_ARTIFACT

    @property
    def source(self):
        if self._source is None:
            self._source = YouTubeTranscriptLoader()
        return self._source

    @property
    def model(self) -> LanguageModel:
        if self._model is None:
            self._model = OllamaLanguageModel(
                model=self.config.model,
                base_url=self.config.base_url,
                temperature=self.config.temperature,
            )
        return self._model

    def run(self) -> PipelineResult:
        """
        Run every stage in order.

        Returns:
            PipelineResult with the document, the chunks and, when the
            summarize stage is enabled, the summary

        Raises:
            PipelineError: Tagged with the stage that failed
        """
        logging.info("Starting job...")
        deadline = Deadline(self.config.run_timeout)

        document = self._stage(FETCH, self.fetch)
        chunks = self._stage(CHUNK, self.chunk, document, deadline=deadline)

        summary = None
        if self.config.do_summarize:
            summary = self._stage(SUMMARIZE, self.summarize, chunks, deadline, deadline=deadline)

        logging.info("Job complete!")
        return PipelineResult(document=document, chunks=chunks, summary=summary)

    def _stage(self, name: str, func, *args, deadline: Optional[Deadline] = None):
        try:
            if deadline is not None:
                deadline.check(operation=name)
            return func(*args)
        except PipelineError as e:
            if e.stage is None:
                e.stage = name
            logging.error(e.describe())
            raise

    def fetch(self) -> Document:
        """Fetch the transcript, or load it from the fetch artifact."""
        if not self.config.do_fetch:
            logging.info(f"Loading YouTube data from {self.fetch_path}")
            return self._load_document(self.fetch_path)

        logging.info("Fetching YouTube data...")
        document = self.source.load(
            self.config.video_url,
            language=self.config.language,
            include_metadata=self.config.include_metadata,
        )
        save_json(document.to_dict(), self.fetch_path)
        logging.info(f"Transcript saved to: {self.fetch_path}")
        return document

    def chunk(self, document: Document) -> List[Document]:
        """Split the document, or load the chunks from the split artifact."""
        if not self.config.do_split:
            logging.info(f"Loading split data from {self.split_path}")
            return self._load_chunks(self.split_path)

        logging.info("Splitting data...")
        chunker = RecursiveTextChunker(self.config.chunk_size, self.config.chunk_overlap)
        chunks = chunker.split_documents([document])
        save_json([chunk.to_dict() for chunk in chunks], self.split_path)
        logging.info(f"{len(chunks)} chunks saved to: {self.split_path}")
        return chunks

    def summarize(self, chunks: List[Document], deadline: Optional[Deadline] = None) -> SummaryResult:
        """Summarize the chunks with the configured strategy."""
        logging.info(f"Summarizing with {self.config.strategy.value} using {self.config.model}...")
        summarizer = get_summarizer(
            self.config.strategy,
            max_prompt_chars=self.config.max_prompt_chars,
            max_concurrency=self.config.max_concurrency,
            deadline=deadline,
        )
        result = summarizer.run(chunks, self.model)

        save_json(result.text, self.summary_path)
        if self.config.save_intermediate_steps:
            save_json(result.intermediate_steps, self.intermediate_path)
        logging.info(f"Summary saved to: {self.summary_path} ({result.call_count} model calls)")
        return result

    def _load_document(self, path: Path) -> Document:
        data = load_json(path)
        try:
            return Document.from_dict(data)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ArtifactFailure(f"Artifact at {path} is not a document: {e}") from e

    def _load_chunks(self, path: Path) -> List[Document]:
        data = load_json(path)
        if not isinstance(data, list):
            raise ArtifactFailure(f"Artifact at {path} is not a list of documents")
        try:
            return [Document.from_dict(item) for item in data]
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ArtifactFailure(f"Artifact at {path} holds a malformed document: {e}") from e


def run_pipeline(config: PipelineConfig, source=None, model: Optional[LanguageModel] = None) -> PipelineResult:
    """Run a summarization job end to end."""
    return SummarizationPipeline(config, source=source, model=model).run()
