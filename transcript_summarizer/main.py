"""
Main entry point for the YouTube Transcript Summarizer.
"""

import sys
import argparse
from typing import List, Optional

from dotenv import load_dotenv

from transcript_summarizer.config import config
from transcript_summarizer.core.pipeline import run_pipeline
from transcript_summarizer.models.schemas import PipelineConfig, SummaryStrategy
from transcript_summarizer.utils.error_handling import PipelineError
from transcript_summarizer.utils.logger import logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="YouTube Transcript Summarizer")
    parser.add_argument("url", nargs="?", default=config.VIDEO_URL, help="YouTube video URL")
    parser.add_argument("--no-fetch", action="store_true",
                        help="Load the transcript from the fetch artifact instead of YouTube")
    parser.add_argument("--no-split", action="store_true",
                        help="Load the chunks from the split artifact instead of splitting")
    parser.add_argument("--no-summarize", action="store_true",
                        help="Stop after splitting the transcript")
    parser.add_argument("--chunk-size", type=int, default=None,
                        help="Maximum characters per chunk (default: CHUNK_SIZE or 500)")
    parser.add_argument("--chunk-overlap", type=int, default=None,
                        help="Characters repeated between consecutive chunks (default: CHUNK_OVERLAP or 10)")
    parser.add_argument("--strategy", choices=[s.value for s in SummaryStrategy],
                        default=None,
                        help="How chunk summaries are combined (default: SUMMARIZATION_TYPE or refine)")
    parser.add_argument("--model", default=config.DEFAULT_SUMMARY_MODEL,
                        help="Ollama model used for summarization")
    parser.add_argument("--base-url", default=config.OLLAMA_BASE_URL,
                        help="Address of the Ollama server")
    parser.add_argument("--language", default=config.TRANSCRIPT_LANGUAGE,
                        help="Transcript language code")
    parser.add_argument("--no-video-info", action="store_true",
                        help="Do not add title, author and other video info to the metadata")
    parser.add_argument("--max-concurrency", type=int, default=config.MAX_CONCURRENCY,
                        help="Parallel map calls for the map_reduce strategy")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Abort the run after this many seconds")
    parser.add_argument("--artifacts-dir", default=str(config.ARTIFACTS_DIR),
                        help="Directory holding the stage artifacts")
    parser.add_argument("--save-steps", action="store_true",
                        help="Also save the intermediate summaries")
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    """Build the immutable job configuration from parsed arguments."""
    # Options left unset fall back to the environment defaults of PipelineConfig
    overrides = {
        name: value
        for name, value in (
            ("chunk_size", args.chunk_size),
            ("chunk_overlap", args.chunk_overlap),
            ("strategy", args.strategy),
        )
        if value is not None
    }
    return PipelineConfig(
        video_url=args.url,
        do_fetch=not args.no_fetch,
        do_split=not args.no_split,
        do_summarize=not args.no_summarize,
        model=args.model,
        base_url=args.base_url,
        language=args.language,
        include_metadata=not args.no_video_info,
        max_concurrency=args.max_concurrency,
        run_timeout=args.timeout,
        artifacts_dir=args.artifacts_dir,
        save_intermediate_steps=args.save_steps,
        **overrides,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the application from command line."""
    # Load environment variables
    load_dotenv()

    args = build_parser().parse_args(argv)
    logging.setLevel(config.LOG_LEVEL)

    try:
        job_config = config_from_args(args)
        result = run_pipeline(job_config)
    except PipelineError as e:
        logging.error(f"Job aborted: {e.describe()}")
        print(f"\nJob failed: {e.describe()}", file=sys.stderr)
        return 1

    if result.summary is None:
        print(f"\nSplit transcript into {len(result.chunks)} chunks; summarization skipped.")
        return 0

    title = result.document.metadata.get("title") if result.document else None
    print("\n" + "=" * 80)
    print(f"Summary of '{title}'" if title else "Summary")
    print("=" * 80)
    print(result.summary.text)
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
