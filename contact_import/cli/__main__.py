from __future__ import annotations

import argparse
import asyncio
import os
import sys
from contextlib import ExitStack
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from contact_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from contact_import.db.contact_store import ContactStore, InMemoryContactStore, connect
from contact_import.logging.error_log import ErrorLogBuffer
from contact_import.logging.init import get_logger, log_summary, set_debug, setup_logging
from contact_import.models.error_record import ErrorRecord
from contact_import.models.import_result import ImportResult
from contact_import.models.payload import ImportMethod
from contact_import.parsers.errors import FormatError
from contact_import.services.export import backup_filename, export_contacts
from contact_import.services.preview import preview_frame
from contact_import.services.progress import is_tty_enabled
from contact_import.services.session import ImportSession
from contact_import.services.summary import render_summary_body
from contact_import.services.template import write_template

"""CLI entrypoint.

Commands:
- template: write contacts-template.csv
- preview:  parse a CSV / JSON file and print the preview table
- import:   preview, then (with --yes) commit every contact and print SUMMARY;
            --export-backup DIR also writes contacts-backup-YYYY-MM-DD.json

Exit codes: 0 = everything imported, 2 = some records skipped, 1 = fatal
(config error, unreadable input, invalid JSON, database unavailable).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

FILE_METHODS = (ImportMethod.CSV.value, ImportMethod.JSON.value)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so that DB connection variables in it win over the shell."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="contact_import", description="Bulk contact importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("template", help="Write the CSV template")
    t.add_argument("--output", type=Path, default=Path("."), help="Target directory")

    for name, help_text in (("preview", "Show parsed contacts"), ("import", "Import contacts")):
        c = sub.add_parser(name, help=help_text)
        c.add_argument("file", help="Input file ('-' for stdin)")
        c.add_argument("--method", choices=FILE_METHODS, default=None, help="Input format")
        if name == "import":
            c.add_argument("--yes", action="store_true", help="Commit without asking")
            c.add_argument("--dry-run", action="store_true", help="Use the in-memory store")
            c.add_argument(
                "--export-backup",
                type=Path,
                default=None,
                metavar="DIR",
                help="Write a JSON backup of the imported contacts to DIR",
            )
    return p.parse_args(argv)


def _read_input(file_arg: str) -> str:
    if file_arg == "-":
        return sys.stdin.read()
    return Path(file_arg).read_text(encoding="utf-8-sig")


def _resolve_method(args: argparse.Namespace, cfg: ImportConfig) -> ImportMethod:
    if args.method:
        return ImportMethod(args.method)
    method = ImportMethod(cfg.default_method)
    if method is ImportMethod.MANUAL:
        # 手入力は CLI では不可
        raise ConfigError("default_method 'manual' is not available from the command line; pass --method")
    return method


def _print_preview(session: ImportSession) -> None:
    frame = preview_frame(session.preview_contacts)
    print(f"Import Preview ({len(frame)} contacts)")
    if not frame.empty:
        print(frame.to_string(index=False))


def _open_store(cfg: ImportConfig, dry_run: bool, stack: ExitStack) -> tuple[ContactStore, str]:
    if dry_run or os.getenv("DISABLE_DB_CONNECT") == "1":
        return InMemoryContactStore(), "mock"
    store = stack.enter_context(connect(cfg))
    return store, "live"


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    log_path = error_log.flush()
    if log_path is not None:
        get_logger().info(f"error log: {log_path}")


def _write_backup(store: ContactStore, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename()
    contacts = store.contacts()
    path.write_text(export_contacts(contacts) + "\n", encoding="utf-8")
    get_logger().info(f"backup written: {path} contacts={len(contacts)}")
    return path


def _exit_code(result: ImportResult) -> int:
    return EXIT_PARTIAL_FAILURE if result.skipped > 0 else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む ([] はテストからの明示的な空引数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    if args.command == "template":
        path = write_template(args.output)
        logger.info(f"template written: {path}")
        print(path)
        return EXIT_SUCCESS_ALL

    try:
        cfg = load_config(args.config)
        method = _resolve_method(args, cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        text = _read_input(args.file)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    source = "<stdin>" if args.file == "-" else Path(args.file).name
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir))

    with ExitStack() as stack:
        store: ContactStore = InMemoryContactStore()
        db_mode = "mock"
        if args.command == "import" and args.yes:
            try:
                store, db_mode = _open_store(cfg, args.dry_run, stack)
            except psycopg2.Error as e:
                logger.error(f"database: {e}".strip())
                return EXIT_FATAL

        session = ImportSession(
            store.create,
            method=method,
            error_log=error_log,
            source=source,
            show_progress=is_tty_enabled(),
        )
        session.set_text(text)
        try:
            session.preview()
        except FormatError as e:
            logger.error(f"Error parsing data: {e}")
            error_log.append(ErrorRecord.create(source, -1, "", "FORMAT_ERROR", str(e)))
            _flush_error_log(error_log)
            return EXIT_FATAL

        _print_preview(session)
        if args.command == "preview":
            return EXIT_SUCCESS_ALL
        if not args.yes:
            logger.info("preview only; re-run with --yes to import")
            return EXIT_SUCCESS_ALL
        if not session.preview_contacts:
            logger.warning(f"no contacts found in {source}")
            log_summary(render_summary_body(ImportResult(imported=0, skipped=0)))
            return EXIT_SUCCESS_ALL

        logger.info(f"mode={db_mode} importing {len(session.preview_contacts)} contacts from {source}")
        result = asyncio.run(session.confirm())

        if args.export_backup is not None:
            try:
                _write_backup(store, args.export_backup)
            except OSError as e:
                logger.error(f"backup: {e}")

    _flush_error_log(error_log)
    log_summary(render_summary_body(result))
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
