"""
Configuration for pytest tests.
"""

import os
import pytest

from transcript_summarizer.models.schemas import Document, PipelineConfig

from tests.stubs import RecordingModel, StubSource


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment variables."""
    os.environ["ENVIRONMENT"] = "development"
    yield


@pytest.fixture
def test_video_url():
    """Return a test YouTube video URL."""
    return "https://www.youtube.com/watch?v=5-TgqZ8nado"


@pytest.fixture
def transcript_document(test_video_url):
    """Fixture to create a fetched transcript document."""
    text = " ".join(
        f"Sentence number {i} talks about nuclear fusion and plasma." for i in range(60)
    )
    return Document(
        text=text,
        metadata={"source": "5-TgqZ8nado", "title": "Nuclear Fusion Explained", "author": "Test Author"},
    )


@pytest.fixture
def recording_model():
    return RecordingModel()


@pytest.fixture
def stub_source(transcript_document):
    return StubSource(transcript_document)


@pytest.fixture
def pipeline_config(tmp_path, test_video_url):
    """Fixture to create a pipeline configuration writing into a temp dir."""
    return PipelineConfig(
        video_url=test_video_url,
        chunk_size=500,
        chunk_overlap=10,
        strategy="map_reduce",
        artifacts_dir=str(tmp_path / "artifacts"),
    )
