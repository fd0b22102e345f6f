"""
YouTube transcript loader module.
"""

import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse, parse_qs

from pytubefix import YouTube
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    CouldNotRetrieveTranscript,
    InvalidVideoId,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
)

from transcript_summarizer.models.schemas import Document
from transcript_summarizer.utils.error_handling import SourceFailure
from transcript_summarizer.utils.logger import logging

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(url: str) -> str:
    """
    Extract the video id from a YouTube URL.

    Args:
        url: Watch, short-link, shorts, embed or live URL, or a bare video id

    Returns:
        The 11 character video id

    Raises:
        SourceFailure: If no video id can be found
    """
    url = (url or "").strip()
    if VIDEO_ID_PATTERN.match(url):
        return url

    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    candidate = None
    if host == "youtu.be" or host.endswith(".youtu.be"):
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host == "youtube.com" or host.endswith(".youtube.com"):
        if parsed.path == "/watch":
            candidate = parse_qs(parsed.query).get("v", [None])[0]
        else:
            parts = parsed.path.strip("/").split("/")
            if len(parts) >= 2 and parts[0] in ("shorts", "embed", "live", "v"):
                candidate = parts[1]

    if not candidate or not VIDEO_ID_PATTERN.match(candidate):
        raise SourceFailure(f"Not a YouTube video URL: {url!r}", kind=SourceFailure.NOT_FOUND)
    return candidate


class YouTubeTranscriptLoader:
    """Class to load a YouTube video's transcript as a Document."""

    def __init__(self, transcript_api: Optional[YouTubeTranscriptApi] = None):
        self.transcript_api = transcript_api or YouTubeTranscriptApi()

    def fetch_transcript(self, video_id: str, language: str = "en") -> str:
        """
        Fetch the transcript text of a video.

        Args:
            video_id: YouTube video id
            language: Language code of the wanted transcript

        Returns:
            Transcript snippets joined into one text
        """
        try:
            fetched = self.transcript_api.fetch(video_id, languages=[language])
        except (NoTranscriptFound, TranscriptsDisabled) as e:
            raise SourceFailure(
                f"No '{language}' transcript available for video {video_id}",
                kind=SourceFailure.UNSUPPORTED,
            ) from e
        except (VideoUnavailable, InvalidVideoId) as e:
            raise SourceFailure(f"Video {video_id} not found", kind=SourceFailure.NOT_FOUND) from e
        except CouldNotRetrieveTranscript as e:
            raise SourceFailure(
                f"Could not retrieve the transcript of video {video_id}: {e}",
                kind=SourceFailure.UNAVAILABLE,
            ) from e

        return " ".join(
            snippet.text.strip() for snippet in fetched if snippet.text and snippet.text.strip()
        )

    def get_video_info(self, video_id: str) -> Dict[str, Any]:
        """Extract metadata from the YouTube video."""
        try:
            yt = YouTube(f"https://www.youtube.com/watch?v={video_id}")
            publish_date = yt.publish_date
            return {
                "title": yt.title,
                "description": yt.description,
                "view_count": yt.views,
                "author": yt.author,
                "length_seconds": yt.length,
                "publish_date": publish_date.isoformat() if publish_date else None,
            }
        except Exception as e:
            raise SourceFailure(
                f"Could not load video info for {video_id}: {e}",
                kind=SourceFailure.UNAVAILABLE,
                operation="load_video_info",
            ) from e

    def load(self, url: str, language: str = "en", include_metadata: bool = True) -> Document:
        """
        Load a video's transcript and metadata.

        Args:
            url: YouTube video URL or id
            language: Language code of the wanted transcript
            include_metadata: Whether to add title, author and other video info

        Returns:
            Document holding the transcript text
        """
        video_id = extract_video_id(url)
        logging.info(f"Fetching '{language}' transcript for video {video_id}")

        text = self.fetch_transcript(video_id, language)
        if not text:
            raise SourceFailure(f"Transcript of video {video_id} is empty", kind=SourceFailure.UNSUPPORTED)

        metadata: Dict[str, Any] = {"source": video_id}
        if include_metadata:
            metadata.update(self.get_video_info(video_id))

        logging.info(f"Fetched transcript of {len(text)} characters")
        return Document(text=text, metadata=metadata)
