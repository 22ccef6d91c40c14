"""Entry point for the local promptsync control API.

Serves a dry-run session: outbound messages are recorded and logged rather
than sent to a backend. Embedding applications bind their own transport and
call ``create_api_app`` directly.
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler

import uvicorn

from promptsync import __version__
from promptsync.realtime.session import ControlSession, SessionPhase
from promptsync.realtime.stories import StoryBook, default_story_book

from .api_server import create_api_app
from .logs_config import cleanup_old_logs, ensure_logs_dir, get_current_log_file
from .session_config import (
    emit_neutral_on_reset,
    get_api_host,
    get_api_port,
    get_auto_start_prompt,
    get_stories_file,
    is_verbose_logging,
)
from .transport import RecordingTransport

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(log_to_file: bool = True):
    """Console at INFO, rotating file per process, quiet third-party loggers."""
    # Root at WARNING keeps non-app libraries quiet by default
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, RotatingFileHandler
        ):
            handler.setLevel(logging.INFO)

    if log_to_file:
        ensure_logs_dir()
        cleanup_old_logs(max_age_days=1)
        file_handler = RotatingFileHandler(
            get_current_log_file(),
            maxBytes=5 * 1024 * 1024,  # 5 MB per file
            backupCount=5,
        )
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    logging.getLogger("promptsync").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)

    if is_verbose_logging():
        logging.getLogger("promptsync").setLevel(logging.DEBUG)
        logging.getLogger("uvicorn.access").setLevel(logging.INFO)
        logging.getLogger("fastapi").setLevel(logging.INFO)
        logging.getLogger("aiortc").setLevel(logging.INFO)


def load_stories() -> StoryBook:
    stories_file = get_stories_file()
    if stories_file is None:
        return default_story_book()
    return StoryBook.from_file(stories_file)


def create_dry_run_app():
    """Control API over a RecordingTransport that logs each outbound message."""
    transport = RecordingTransport(phase=SessionPhase.READY)
    session = ControlSession(
        transport.send,
        emit_neutral_on_reset=emit_neutral_on_reset(),
        auto_start_prompt=get_auto_start_prompt(),
    )
    session.dispatcher.add_listener(
        lambda message: logger.info(f"[DRY-RUN] Outbound: {message}")
    )
    transport.bind(session)
    return create_api_app(session, stories=load_stories())


def main():
    """Main entry point for the promptsync-server command."""
    parser = argparse.ArgumentParser(
        description="promptsync - local control API for a streaming generative session"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    parser.add_argument(
        "--host",
        default=get_api_host(),
        help="Host to bind to (default: PROMPTSYNC_API_HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to bind to (default: PROMPTSYNC_API_PORT or 8000)",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only",
    )

    args = parser.parse_args()

    if args.version:
        print(f"promptsync {__version__}")
        sys.exit(0)

    configure_logging(log_to_file=not args.no_log_file)

    logger.info(f"Starting promptsync dry-run API on {args.host}:{args.port}")
    uvicorn.run(
        create_dry_run_app(),
        host=args.host,
        port=args.port,
        log_config=None,  # Use our logging config, don't override it
    )


if __name__ == "__main__":
    main()
