"""promptsync - control and prompt synchronization for streaming generative sessions."""

__version__ = "0.1.0"
