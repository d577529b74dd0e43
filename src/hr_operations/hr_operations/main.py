from __future__ import annotations

import importlib
import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from flask import Flask
from flask.cli import AppGroup

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import build_container
from .common.http import register_error_handlers
from .attendance.controller import register as register_attendance
from .holidays.controller import register as register_holidays
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll
from .jobs import register as register_jobs

log = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        log.info("schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        log.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        working_days=getattr(settings, "WORKING_DAYS", None),
        leave_policy=getattr(settings, "LEAVE_POLICY", None),
        smtp=getattr(settings, "SMTP", None),
        payroll_workers=int(getattr(settings, "PAYROLL_WORKERS", 4)),
    )
    app.extensions["hr_operations"] = container

    register_error_handlers(app)
    register_holidays(app, container)
    register_leave(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_jobs(app, container)

    db_cli = AppGroup("db", help="Database setup.")

    @db_cli.command("init")
    @click.option("--seed", is_flag=True, help="Also load demo rows.")
    def db_init(seed: bool):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        if seed:
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        click.echo(f"Tables: {', '.join(list_tables(db_config))}")

    app.cli.add_command(db_cli)
    return app
