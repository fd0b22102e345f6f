"""
Data models for the transcript summarizer.
"""
from enum import Enum
from types import MappingProxyType
from typing import Optional, List, Dict, Any, Mapping
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from transcript_summarizer.config import config
from transcript_summarizer.utils.error_handling import InvalidConfiguration


class Document(BaseModel):
    """A piece of text plus the metadata describing where it came from.

    Metadata is exposed as a read-only mapping; derive new documents instead
    of editing an existing one.
    """
    text: str
    metadata: Mapping[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("metadata", mode="after")
    @classmethod
    def freeze_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("metadata")
    def serialize_metadata(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "metadata": dict(self.metadata)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(text=data["text"], metadata=dict(data.get("metadata") or {}))


class SummaryStrategy(str, Enum):
    """Ways of combining chunk summaries into one summary."""
    STUFF = "stuff"
    MAP_REDUCE = "map_reduce"
    REFINE = "refine"


def validate_chunk_parameters(chunk_size: int, chunk_overlap: int) -> None:
    """Raise InvalidConfiguration unless 0 <= chunk_overlap < chunk_size."""
    for name, value in (("chunk_size", chunk_size), ("chunk_overlap", chunk_overlap)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if chunk_size <= 0:
        raise InvalidConfiguration(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise InvalidConfiguration(f"chunk_overlap must not be negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise InvalidConfiguration(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )


class PipelineConfig(BaseModel):
    """Immutable configuration for one pipeline run.

    Environment defaults are validated when the configuration is built; any
    invalid field raises InvalidConfiguration.
    """
    video_url: Optional[str] = config.VIDEO_URL
    do_fetch: bool = True
    do_split: bool = True
    do_summarize: bool = True
    chunk_size: int = Field(default_factory=lambda: config.CHUNK_SIZE)
    chunk_overlap: int = Field(default_factory=lambda: config.CHUNK_OVERLAP)
    strategy: SummaryStrategy = Field(default_factory=lambda: config.SUMMARIZATION_TYPE)
    model: str = config.DEFAULT_SUMMARY_MODEL
    base_url: str = config.OLLAMA_BASE_URL
    language: str = config.TRANSCRIPT_LANGUAGE
    include_metadata: bool = True
    temperature: float = config.TEMPERATURE
    max_prompt_chars: int = config.MAX_PROMPT_CHARS
    max_concurrency: int = config.MAX_CONCURRENCY
    run_timeout: Optional[float] = None
    artifacts_dir: str = str(config.ARTIFACTS_DIR)
    save_intermediate_steps: bool = False

    model_config = ConfigDict(frozen=True, validate_default=True)

    @model_validator(mode="wrap")
    @classmethod
    def report_invalid_fields(cls, data, handler):
        try:
            return handler(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                for error in e.errors()
            )
            raise InvalidConfiguration(f"Invalid job configuration: {problems}") from e

    @model_validator(mode="after")
    def check_job(self):
        validate_chunk_parameters(self.chunk_size, self.chunk_overlap)
        if self.do_fetch and not self.video_url:
            raise InvalidConfiguration("A video URL is required when fetching is enabled")
        if self.max_concurrency < 1:
            raise InvalidConfiguration(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        if self.max_prompt_chars <= 0:
            raise InvalidConfiguration(f"max_prompt_chars must be positive, got {self.max_prompt_chars}")
        if self.run_timeout is not None and self.run_timeout <= 0:
            raise InvalidConfiguration(f"run_timeout must be positive, got {self.run_timeout}")
        return self

class SummaryResult(BaseModel):
    """Final summary of a run plus the partial summaries that led to it."""
    text: str
    strategy: SummaryStrategy
    intermediate_steps: List[str] = Field(default_factory=list)
    call_count: int = 0

    model_config = ConfigDict(frozen=True)


class PipelineResult(BaseModel):
    """Everything one pipeline run produced or loaded."""
    document: Optional[Document] = None
    chunks: List[Document] = Field(default_factory=list)
    summary: Optional[SummaryResult] = None

    model_config = ConfigDict(frozen=True)
