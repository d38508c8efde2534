"""
flagguard CLI — configuration checks and data audits.

Commands:
- flagguard check-config  — Validate flagguard.yaml and list configured guards
- flagguard audit         — Count rows holding each guarded value in the database

`audit` finds data that already violates a guard (more than one row with the
guarded value), e.g. rows written before the guard was installed or by a
concurrent save the guard cannot prevent.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from flagguard.validators.unique_flag import format_flag

logger = logging.getLogger("flagguard.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="flagguard",
        description="flagguard — single active flag validation",
    )
    parser.add_argument(
        "--config", default=None, help="Path to flagguard.yaml (default: auto-discover)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # flagguard check-config
    subparsers.add_parser("check-config", help="Validate flagguard.yaml")

    # flagguard audit
    audit_parser = subparsers.add_parser("audit", help="Report guarded values held by more than one row")
    audit_parser.add_argument("--database-url", help="Override database.url from the config")
    audit_parser.add_argument("--record", help="Only audit guards on this table")

    args = parser.parse_args(argv)

    if args.command == "check-config":
        return cmd_check_config(args)
    elif args.command == "audit":
        return cmd_audit(args)
    else:
        parser.print_help()
        return 0


def _load(args: argparse.Namespace):
    from flagguard.engine.config import load_config
    from flagguard.engine.errors import FlagGuardConfigError
    from flagguard.engine.logging import configure_logging, init_logging

    try:
        config = load_config(args.config)
    except FlagGuardConfigError as e:
        print(f"[ERROR] {e.message}")
        return None

    configure_logging(config.logging)
    if config.logging.directory:
        init_logging(config.logging.directory)
    return config


def cmd_check_config(args: argparse.Namespace) -> int:
    """Validate the configuration file and print the guards it defines."""
    config = _load(args)
    if config is None:
        return 1

    print(f"[OK] {config.name} ({config.environment})")
    if not config.guards:
        print("No guards configured.")
        return 0

    for rule in config.guards:
        client = " [client check]" if rule.client_side_check_enabled else ""
        print(f"  - {rule.record}.{rule.attribute} unique when {format_flag(rule.guarded_value)}{client}")
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    """Count rows per guard; more than one row with the guarded value is a violation."""
    from sqlalchemy import MetaData, Table, func, select
    from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

    from flagguard.db.session import create_db_engine

    config = _load(args)
    if config is None:
        return 1

    rules = config.guards
    if args.record:
        rules = config.guards_for(args.record)
    if not rules:
        print("No guards to audit.")
        return 0

    engine = create_db_engine(config.database, url=args.database_url)
    metadata = MetaData()
    problems = 0

    try:
        with engine.connect() as conn:
            for rule in rules:
                label = f"{rule.record}.{rule.attribute}={format_flag(rule.guarded_value)}"
                try:
                    table = metadata.tables.get(rule.record)
                    if table is None:
                        table = Table(rule.record, metadata, autoload_with=conn)
                except NoSuchTableError:
                    print(f"[ERROR] {label}: table '{rule.record}' not found")
                    problems += 1
                    continue

                if rule.attribute not in table.c:
                    print(f"[ERROR] {label}: column '{rule.attribute}' not found")
                    problems += 1
                    continue

                stmt = (
                    select(func.count())
                    .select_from(table)
                    .where(table.c[rule.attribute] == rule.guarded_value)
                )
                count = int(conn.execute(stmt).scalar() or 0)
                if count > 1:
                    print(f"[VIOLATION] {label}: {count} rows")
                    logger.warning(
                        f"Guard violated: {label} held by {count} rows",
                        extra={"record_type": rule.record, "attribute": rule.attribute, "count": count},
                    )
                    problems += 1
                else:
                    print(f"[OK] {label}: {count} row(s)")
    except SQLAlchemyError as e:
        print(f"[ERROR] Database error: {e}")
        return 1
    finally:
        engine.dispose()

    print(f"\n{'All guards hold.' if problems == 0 else f'{problems} problem(s) found.'}")
    return 1 if problems else 0


if __name__ == "__main__":
    raise SystemExit(main())
