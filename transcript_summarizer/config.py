"""
Configuration settings for the transcript summarizer.
"""

import os
from pathlib import Path
from dotenv import load_dotenv


# Ensure environment variables are loaded
load_dotenv()


class Config:
    """Base configuration class."""

    # Application info
    APP_VERSION = "0.2.0"

    # Data directories
    BASE_DIR = Path(__file__).resolve().parent.parent.absolute()
    DATA_DIR = BASE_DIR / "data"
    ARTIFACTS_DIR = Path(os.getenv("ARTIFACTS_DIR", str(DATA_DIR / "artifacts")))

    # Job defaults
    VIDEO_URL = os.getenv("VIDEO_URL", "https://www.youtube.com/watch?v=5-TgqZ8nado")
    TRANSCRIPT_LANGUAGE = os.getenv("TRANSCRIPT_LANGUAGE", "en")
    # Raw strings; PipelineConfig validates them when a job is configured
    CHUNK_SIZE = os.getenv("CHUNK_SIZE", "500")
    CHUNK_OVERLAP = os.getenv("CHUNK_OVERLAP", "10")
    # 'stuff', 'map_reduce' or 'refine'
    SUMMARIZATION_TYPE = os.getenv("SUMMARIZATION_TYPE", "refine")

    # Ollama must be running locally: `ollama serve`
    OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    DEFAULT_SUMMARY_MODEL = os.getenv("OLLAMA_MODEL", "mistral-openorca")
    TEMPERATURE = 0.0
    MAX_PROMPT_CHARS = 16000
    MAX_CONCURRENCY = 1

    # Artifact file names, one per pipeline stage
    FETCH_ARTIFACT = "doc-single.json"
    SPLIT_ARTIFACT = "doc-split.json"
    SUMMARY_ARTIFACT = "doc-summarized.txt"
    INTERMEDIATE_ARTIFACT = "doc-intermediate.json"


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""
    LOG_LEVEL = "INFO"


# Determine which configuration to use based on environment
def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env == "production":
        return ProductionConfig
    else:
        return DevelopmentConfig


# Create a config instance
config = get_config()
