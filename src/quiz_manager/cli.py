"""``quiz`` console entry point."""

from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional, Sequence

from quiz_manager.commands import CommandDispatcher
from quiz_manager.config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    QuizConfigError,
    load_config,
    write_config_template,
)
from quiz_manager.core import workspace as workspace_mod
from quiz_manager.core.logging import LEVELS, configure_logger
from quiz_manager.errors import StoreError
from quiz_manager.output import Output
from quiz_manager.session import InputProvider, LineSession
from quiz_manager.shell import run_shell
from quiz_manager.store import QuizStore

PACKAGE_NAME = "quiz-manager"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz",
        description="Interactive manager for question/answer quizzes.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Print the installed version and exit.",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Override the data home (defaults to QUIZ_MANAGER_HOME or "
            "~/.quiz-manager)."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file.",
    )
    parser.add_argument(
        "--db",
        dest="database",
        type=Path,
        help="SQLite database file holding the quizzes.",
    )
    parser.add_argument(
        "--no-seed",
        dest="seed",
        action="store_false",
        default=None,
        help="Do not insert the sample quizzes into an empty database.",
    )
    parser.add_argument(
        "--log-level",
        choices=LEVELS,
        type=str.upper,
        help="Minimum level written to the log file.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log records to stderr.",
    )

    sub = parser.add_subparsers(dest="command")
    init = sub.add_parser(
        "init-config", help="Write a config template to the workspace."
    )
    init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file.",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    output: Optional[Output] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        return _handle_version()
    if args.command == "init-config":
        return _handle_init_config(args)
    return _handle_shell(
        parser, args, output=output, input_provider=input_provider
    )


def _handle_version() -> int:
    try:
        version = metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        version = "unknown"
    sys.stdout.write(version + "\n")
    return 0


def _handle_init_config(args: argparse.Namespace) -> int:
    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except workspace_mod.WorkspaceError as exc:
        _print_error(str(exc))
        return 2
    target = args.config or layout.path_for("config") / CONFIG_FILENAME
    try:
        path = write_config_template(target, force=args.force)
    except QuizConfigError as exc:
        _print_error(str(exc))
        return 1
    sys.stdout.write(f"Created template {path}\n")
    return 0


def _handle_shell(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    *,
    output: Optional[Output],
    input_provider: Optional[InputProvider],
) -> int:
    overrides = ConfigOverrides(
        database=args.database,
        seed=args.seed,
        log_level=args.log_level,
        verbose=args.verbose,
    )
    try:
        loaded = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))

    config = loaded.config
    logger, log_path = configure_logger(
        "quiz_manager",
        log_dir=loaded.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug(
        "quiz shell starting",
        extra={"database": config.database, "log_path": log_path},
    )

    output = output or Output()
    store: Optional[QuizStore] = None
    try:
        store = QuizStore.open(config.database)
        report = store.initialize(seed=config.seed)
    except StoreError as exc:
        logger.exception("Database initialisation failed")
        output.errorlog(str(exc))
        if store is not None:
            store.close()
        return 1
    output.log(f"  {report.describe()}")

    session = LineSession(
        output.console,
        prompt_text=config.prompt,
        input_provider=input_provider,
    )
    dispatcher = CommandDispatcher(store, output)
    try:
        return run_shell(dispatcher, session, output)
    finally:
        store.close()


def _print_error(message: str) -> None:
    sys.stderr.write(message + "\n")


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
