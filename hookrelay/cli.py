"""CLI entrypoints for hookrelay commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging, get_logger
from .models import HookEvent, HookState
from .notify import Notifier
from .stores import RecordingError, ResultRecorder


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_repo_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("owner", help="Repository owner or organisation.")
    parser.add_argument("repo", help="Repository name.")
    parser.add_argument(
        "--config-root",
        default=".",
        help="Directory holding config.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookrelay",
        description="Relay repository build status to chat and keep an audit trail.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    ping_parser = subparsers.add_parser(
        "ping",
        help="Send a test message using the configured template and chat room.",
    )
    _add_verbose_option(ping_parser, suppress_default=True)
    _add_repo_arguments(ping_parser)
    ping_parser.add_argument(
        "--state",
        choices=[state.value for state in HookState],
        default=HookState.PENDING.value,
        help="Which template to render (defaults to pending).",
    )
    ping_parser.add_argument("--target", default="", help="Value bound to the Target placeholder.")
    ping_parser.add_argument("--user", default="", help="Value bound to the UserName placeholder.")

    runs_parser = subparsers.add_parser(
        "runs",
        help="List recorded runs for a repository, newest first.",
    )
    _add_verbose_option(runs_parser, suppress_default=True)
    _add_repo_arguments(runs_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for hookrelay commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")

    try:
        config = load_config(Path(args.config_root), args.owner, args.repo)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "ping":
        try:
            event = HookEvent(
                owner=args.owner,
                repo=args.repo,
                event_name="ping",
                target=args.target,
                user_name=args.user,
            )
        except ValueError as exc:
            parser.exit(1, f"{exc}\n")
        state = HookState(args.state)
        sent = Notifier().notify(
            config.template_for(state.value), config, event, state=state, logger=logger
        )
        if not sent:
            parser.exit(1, "hookrelay ping: message was not delivered\nRun with --verbose for more details.\n")
        print(f"Sent {state.value} message to room {config.hipchat_room}")
    elif args.command == "runs":
        try:
            runs = ResultRecorder().list_runs(config.result_root, args.owner, args.repo)
        except RecordingError as exc:
            parser.exit(1, f"{exc}\n")
        if not runs:
            print(f"No runs recorded for {args.owner}/{args.repo}")
            return
        for run in runs:
            if run.event is None:
                print(f"{run.run_id}\t(unreadable hook.json)")
            else:
                print(f"{run.run_id}\t{run.event.event_name or '-'}\t{run.event.status_ref or '-'}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
