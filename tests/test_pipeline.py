"""
Integration tests for the summarization pipeline.
"""

import json
import pytest
from unittest.mock import patch

from transcript_summarizer.core.pipeline import SummarizationPipeline, run_pipeline
from transcript_summarizer.models.schemas import Document, PipelineConfig
from transcript_summarizer.utils.helpers import Deadline, save_json
from transcript_summarizer.utils.error_handling import (
    ArtifactFailure,
    ModelFailure,
    RunTimeout,
    SourceFailure,
)

from tests.stubs import RecordingModel, StubSource


def with_changes(config, **changes):
    return PipelineConfig(**{**config.model_dump(), **changes})


def test_full_run_writes_every_artifact(pipeline_config, stub_source, recording_model, transcript_document):
    """Fetch, chunk and summarize run in order and persist their artifacts."""
    pipeline = SummarizationPipeline(pipeline_config, source=stub_source, model=recording_model)

    result = pipeline.run()

    assert stub_source.calls == [(pipeline_config.video_url, "en", True)]
    assert result.document == transcript_document
    assert len(result.chunks) > 1
    assert recording_model.call_count == len(result.chunks) + 1
    assert result.summary.text == f"summary #{len(result.chunks) + 1}"

    with open(pipeline.fetch_path, encoding="utf-8") as f:
        assert json.load(f) == {"text": transcript_document.text, "metadata": dict(transcript_document.metadata)}
    with open(pipeline.split_path, encoding="utf-8") as f:
        assert [item["text"] for item in json.load(f)] == [chunk.text for chunk in result.chunks]
    with open(pipeline.summary_path, encoding="utf-8") as f:
        assert json.load(f) == result.summary.text
    assert not pipeline.intermediate_path.exists()


def test_resummarize_from_artifacts(pipeline_config, stub_source, transcript_document):
    """A second run can reuse the fetch and split artifacts of the first."""
    first = run_pipeline(pipeline_config, source=stub_source, model=RecordingModel())

    config = with_changes(pipeline_config, do_fetch=False, do_split=False, strategy="refine")
    source = StubSource(error=AssertionError("source must not be called"))
    model = RecordingModel()
    second = run_pipeline(config, source=source, model=model)

    assert source.calls == []
    assert second.document == transcript_document
    assert second.chunks == first.chunks
    assert model.call_count == len(first.chunks)


def test_rechunk_from_fetch_artifact(pipeline_config, stub_source):
    run_pipeline(with_changes(pipeline_config, do_summarize=False), source=stub_source)

    config = with_changes(pipeline_config, do_fetch=False, chunk_size=200, chunk_overlap=20, do_summarize=False)
    result = run_pipeline(config, source=StubSource(error=AssertionError("not called")))

    assert all(len(chunk.text) <= 200 for chunk in result.chunks)
    assert len(stub_source.calls) == 1


def test_summarize_off_ends_after_chunk(pipeline_config, stub_source):
    config = with_changes(pipeline_config, do_summarize=False)
    pipeline = SummarizationPipeline(config, source=stub_source)

    with patch("transcript_summarizer.core.pipeline.OllamaLanguageModel") as mock_model_class:
        result = pipeline.run()

    mock_model_class.assert_not_called()
    assert result.summary is None
    assert pipeline.split_path.exists()
    assert not pipeline.summary_path.exists()


def test_fetch_disabled_without_artifact_fails_before_chunk(pipeline_config):
    config = with_changes(pipeline_config, do_fetch=False)
    pipeline = SummarizationPipeline(config, source=StubSource(), model=RecordingModel())

    with patch.object(SummarizationPipeline, "chunk") as mock_chunk:
        with pytest.raises(ArtifactFailure) as exc_info:
            pipeline.run()

    mock_chunk.assert_not_called()
    assert exc_info.value.stage == "fetch"
    assert "stage 'fetch'" in exc_info.value.describe()


def test_corrupt_split_artifact(pipeline_config, stub_source):
    config = with_changes(pipeline_config, do_split=False)
    pipeline = SummarizationPipeline(config, source=stub_source, model=RecordingModel())
    pipeline.artifacts_dir.mkdir(parents=True)
    pipeline.split_path.write_text("[{\"metadata\": {}}]", encoding="utf-8")

    with pytest.raises(ArtifactFailure) as exc_info:
        pipeline.run()
    assert exc_info.value.stage == "chunk"


def test_unparseable_artifact(pipeline_config):
    config = with_changes(pipeline_config, do_fetch=False)
    pipeline = SummarizationPipeline(config, model=RecordingModel())
    pipeline.artifacts_dir.mkdir(parents=True)
    pipeline.fetch_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ArtifactFailure):
        pipeline.run()


def test_source_failure_writes_nothing(pipeline_config):
    source = StubSource(error=SourceFailure("no english transcript", kind=SourceFailure.UNSUPPORTED))
    pipeline = SummarizationPipeline(pipeline_config, source=source, model=RecordingModel())

    with pytest.raises(SourceFailure) as exc_info:
        pipeline.run()

    assert exc_info.value.stage == "fetch"
    assert exc_info.value.kind == SourceFailure.UNSUPPORTED
    assert not pipeline.fetch_path.exists()


def test_model_failure_keeps_earlier_artifacts(pipeline_config, stub_source):
    def respond(prompt):
        raise ModelFailure("connection refused", kind=ModelFailure.UNREACHABLE)

    pipeline = SummarizationPipeline(pipeline_config, source=stub_source, model=RecordingModel(respond=respond))

    with pytest.raises(ModelFailure) as exc_info:
        pipeline.run()

    assert exc_info.value.stage == "summarize"
    assert exc_info.value.operation == "generate"
    assert pipeline.fetch_path.exists()
    assert pipeline.split_path.exists()
    assert not pipeline.summary_path.exists()


def test_intermediate_steps_are_saved(pipeline_config, stub_source):
    config = with_changes(pipeline_config, save_intermediate_steps=True)
    pipeline = SummarizationPipeline(config, source=stub_source, model=RecordingModel())

    result = pipeline.run()

    with open(pipeline.intermediate_path, encoding="utf-8") as f:
        assert json.load(f) == result.summary.intermediate_steps
    assert len(result.summary.intermediate_steps) == len(result.chunks)


def test_failed_summary_write_leaves_no_intermediate_steps(pipeline_config, stub_source):
    config = with_changes(pipeline_config, save_intermediate_steps=True)
    pipeline = SummarizationPipeline(config, source=stub_source, model=RecordingModel())

    def failing_summary_write(data, filepath, pretty=True):
        if filepath == pipeline.summary_path:
            raise ArtifactFailure("disk full", operation="save_artifact")
        save_json(data, filepath, pretty)

    with patch("transcript_summarizer.core.pipeline.save_json", side_effect=failing_summary_write):
        with pytest.raises(ArtifactFailure) as exc_info:
            pipeline.run()

    assert exc_info.value.stage == "summarize"
    assert pipeline.split_path.exists()
    assert not pipeline.summary_path.exists()
    assert not pipeline.intermediate_path.exists()


def test_run_timeout_is_checked_between_calls(pipeline_config, stub_source):
    now = [0.0]

    def respond(prompt):
        now[0] += 2
        return "partial"

    def fake_deadline(seconds):
        return Deadline(seconds, clock=lambda: now[0])

    config = with_changes(pipeline_config, run_timeout=5)
    model = RecordingModel(respond=respond)

    with patch("transcript_summarizer.core.pipeline.Deadline", side_effect=fake_deadline):
        with pytest.raises(RunTimeout) as exc_info:
            run_pipeline(config, source=stub_source, model=model)

    assert exc_info.value.stage == "summarize"
    assert model.call_count == 3


def test_run_timeout_after_fetch_is_reported_by_chunk_stage(pipeline_config, transcript_document):
    now = [0.0]

    class SlowSource(StubSource):
        def load(self, url, language="en", include_metadata=True):
            now[0] += 10
            return super().load(url, language, include_metadata)

    def fake_deadline(seconds):
        return Deadline(seconds, clock=lambda: now[0])

    config = with_changes(pipeline_config, run_timeout=5)
    pipeline = SummarizationPipeline(config, source=SlowSource(transcript_document), model=RecordingModel())

    with patch("transcript_summarizer.core.pipeline.Deadline", side_effect=fake_deadline):
        with pytest.raises(RunTimeout) as exc_info:
            pipeline.run()

    assert exc_info.value.stage == "chunk"
    assert "stage 'chunk'" in exc_info.value.describe()
    assert pipeline.fetch_path.exists()
    assert not pipeline.split_path.exists()


def test_default_collaborators_are_built_from_config(pipeline_config, transcript_document):
    with patch("transcript_summarizer.core.pipeline.YouTubeTranscriptLoader") as mock_loader_class, \
            patch("transcript_summarizer.core.pipeline.OllamaLanguageModel") as mock_model_class:
        mock_loader_class.return_value.load.return_value = transcript_document
        mock_model_class.return_value.generate.return_value = "A summary."

        result = run_pipeline(pipeline_config)

    mock_model_class.assert_called_once_with(
        model=pipeline_config.model,
        base_url=pipeline_config.base_url,
        temperature=pipeline_config.temperature,
    )
    assert result.summary.text == "A summary."


def test_artifact_documents_round_trip(pipeline_config):
    document = Document(text="hello", metadata={"source": "abc", "chunk_index": 0})
    assert Document.from_dict(json.loads(json.dumps(document.to_dict()))) == document
