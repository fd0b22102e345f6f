"""
YouTube Transcript Summarizer.

Fetches a YouTube video's transcript, splits it into overlapping chunks and
summarizes it with a locally hosted Ollama model.
"""

from transcript_summarizer.config import config

__version__ = config.APP_VERSION
