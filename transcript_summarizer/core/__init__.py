"""
Core functionality for the transcript summarizer.

This package contains modules for loading YouTube transcripts, chunking
them, talking to the language model and summarizing the chunks.
"""
