"""Command-line front door for lazyput.

Parses CLI options, sets up file logging, resolves an API token (running the
browser-approval flow when none is available), then hands off to the
interactive runtime.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from .auth import AuthOutcome, Cancelled, OOBAuthenticator, TokenIssued, describe_outcome
from .putio import PutioClient
from .runtime import run_browser
from .runtime.config import CONFIG_PATH, TOKEN_ENV_VAR, resolve_token, save_token
from .runtime.logs import configure_logging
from .ui_theme import available_theme_names

logger = logging.getLogger(__name__)

AUTH_JOIN_SECONDS = 0.2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyput",
        description="Browse, download, rename and delete your put.io files from the terminal.",
    )
    parser.add_argument(
        "--token",
        default=None,
        help=f"put.io OAuth token (default: ${TOKEN_ENV_VAR}, then {CONFIG_PATH}).",
    )
    parser.add_argument(
        "--download-dir",
        default=".",
        help="Directory downloads are saved into (default: current directory).",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs here instead of the user log dir.")
    parser.add_argument("--verbose", action="store_true", help="Log debug details, including poll attempts.")
    return parser


def run_authentication(
    authenticator_factory: Callable[[], OOBAuthenticator] = OOBAuthenticator,
    notify: Callable[[str], None] = print,
) -> AuthOutcome:
    """Run the out-of-band flow on a worker thread; Ctrl+C cancels it."""
    cancel = threading.Event()
    outcomes: list[AuthOutcome] = []
    authenticator = authenticator_factory()

    def work() -> None:
        outcomes.append(authenticator.authenticate(cancel, notify))

    worker = threading.Thread(target=work, name="lazyput-auth", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(AUTH_JOIN_SECONDS)
    except KeyboardInterrupt:
        logger.info("Authentication interrupted by user")
        cancel.set()
        worker.join()
    finally:
        authenticator.close()

    outcome = outcomes[0] if outcomes else Cancelled()
    logger.info("Authentication outcome: %s", describe_outcome(outcome))
    return outcome


def obtain_token(override: str | None) -> str | None:
    """Return a usable token, persisting one obtained interactively."""
    token, source = resolve_token(override)
    if token is not None:
        logger.info("Using token from %s", source)
        return token

    print("No put.io token found; starting browser authentication.")
    outcome = run_authentication()
    if not isinstance(outcome, TokenIssued):
        print(f"Error: {describe_outcome(outcome)}", file=sys.stderr)
        return None

    print("Authentication successful.")
    try:
        save_token(outcome.token)
    except OSError as exc:
        logger.warning("Could not save token to %s: %s", CONFIG_PATH, exc)
        print(f"Warning: could not save token: {exc}", file=sys.stderr)
    return outcome.token


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments and launch the browser. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    log_path = configure_logging(args.log_file, args.verbose)
    logger.info("lazyput starting (log file: %s)", log_path)

    token = obtain_token(args.token)
    if token is None:
        return 1

    download_dir = Path(args.download_dir).expanduser()
    client = PutioClient(token)
    try:
        run_browser(client, download_dir, args.theme)
    except Exception as exc:
        logger.exception("Browser crashed")
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()
    return 0
