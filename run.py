#!/usr/bin/env python3
"""
FCF Chatbot Application Entry Point
- Works under both Gunicorn (WSGI import) and python CLI.
- Ensures smart logging is initialized exactly once per process.
- Aligns Flask app logger with root logger for consistent output.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

# Local imports after env load
from fcf_chatbot import create_app
from fcf_chatbot.utils.helpers import env_flag
from fcf_chatbot.utils.smart_logger import LogLevel, configure_logging

# --------------------------------------------------------------------------------------
# Logging initialization (one-time, safe under multiprocess servers like Gunicorn)
# --------------------------------------------------------------------------------------

_LOGGING_INITIALIZED = False  # process-level guard


def _to_python_level(level: LogLevel) -> int:
    mapping = {
        "MINIMAL": logging.INFO,
        "STANDARD": logging.INFO,
        "DETAILED": logging.DEBUG,
        "DEBUG": logging.DEBUG,
    }
    return mapping.get(level.name, logging.INFO)


def setup_smart_logging() -> LogLevel:
    """
    Configure the smart logging system with validation.
    Idempotent: won't add duplicate handlers if called multiple times.
    """
    global _LOGGING_INITIALIZED

    desired = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()
    valid = {lvl.name for lvl in LogLevel}
    if desired not in valid:
        print(f"Warning: Invalid BOT_LOG_LEVEL '{desired}'. Valid options: {', '.join(sorted(valid))}")
        log_level = LogLevel.STANDARD
    else:
        log_level = LogLevel[desired]

    if not _LOGGING_INITIALIZED:
        root = logging.getLogger()
        if not root.handlers:
            configure_logging(
                level=log_level,
                format_string="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                silence_external=True,
            )
        _LOGGING_INITIALIZED = True

    return log_level


# --------------------------------------------------------------------------------------
# Environment validation
# --------------------------------------------------------------------------------------

def validate_environment(strict: bool) -> None:
    """
    The only external input is the decision tree. A missing local file is
    fatal on the CLI path; under WSGI the app still boots and serves the
    chat's error message plus an unhealthy /health.
    """
    source = os.getenv("DECISION_TREE_SOURCE", "")
    if not source or source.lower().startswith(("http://", "https://")):
        return
    if not Path(source).is_file():
        msg = f"DECISION_TREE_SOURCE points to a missing file: {source}"
        if strict:
            print("Error:", msg)
            sys.exit(1)
        logging.getLogger(__name__).warning(msg)


# --------------------------------------------------------------------------------------
# Flask application creation and alignment with logging
# --------------------------------------------------------------------------------------

def _wire_app_logger(app, log_level: LogLevel) -> None:
    """Make Flask's app.logger flow into the root logger configured by smart logging."""
    if app.logger.handlers:
        app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(_to_python_level(log_level))


def create_application(strict_env: bool = False):
    validate_environment(strict=strict_env)

    app = create_app()

    log_level = setup_smart_logging()
    _wire_app_logger(app, log_level)

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


# --------------------------------------------------------------------------------------
# Local dev server (python run.py)
# --------------------------------------------------------------------------------------

def _resolve_server_config() -> Tuple[str, int, bool]:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))
    debug = env_flag(os.getenv("FLASK_DEBUG"),
                     default=os.getenv("APP_ENV", "development").lower() == "development")
    return host, port, debug


def _print_startup_info(app, host: str, port: int, debug: bool, log_level: LogLevel) -> None:
    controller = app.extensions["controller"]
    print("FCF Chatbot Starting")
    print("=" * 60)
    print(f"Chat UI:      http://{host}:{port}/")
    print(f"Health check: http://{host}:{port}/health")
    print(f"Environment:  {os.getenv('APP_ENV', 'development')}")
    print(f"Debug mode:   {debug}")
    print(f"Log level:    {log_level.name}")
    print(f"Process ID:   {os.getpid()}")
    print("-" * 60)
    print(f"Decision tree: {app.config['DECISION_TREE_SOURCE']}")
    if controller.ready:
        print(f"  ✓ {len(controller.store)} states, entry point '{controller.entry_point}'")
    else:
        print(f"  ✗ unavailable: {app.extensions.get('tree_load_error')}")
    print(f"Typing delay: {controller.typing_delay_ms} ms")
    print("=" * 60)


def main() -> None:
    log_level = setup_smart_logging()

    app = create_application(strict_env=True)

    host, port, debug = _resolve_server_config()
    _print_startup_info(app, host, port, debug, log_level)

    try:
        app.run(
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,  # Avoid double init/log handlers in dev
            threaded=True,
        )
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")


if __name__ == "__main__":
    main()
else:
    # WSGI entrypoint for Gunicorn: `gunicorn run:app`
    setup_smart_logging()
    app = create_application(strict_env=False)
