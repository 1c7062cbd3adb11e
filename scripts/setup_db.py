"""
scripts/setup_db.py — Create the company_settings and form_leads tables.

Usage:
    python scripts/setup_db.py              # tables only
    python scripts/setup_db.py --seed       # also store the default form config if none is stored
"""

import argparse
import logging
import os
import sys

# Ensure the project root is on the path so we can import `app`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import inspect, text

from app.db import repository
from app.db.models import Base
from app.db.session import engine, get_session
from app.services.form_config_service import push_default_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("setup_db")


def setup_db(seed: bool = False) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database reachable (%s).", engine.url.render_as_string(hide_password=True))

    Base.metadata.create_all(bind=engine)
    logger.info("Tables present: %s", ", ".join(sorted(inspect(engine).get_table_names())))

    if not seed:
        return
    with get_session() as db:
        if repository.get_stored_form_config(db) is not None:
            logger.info("A form config is already stored; leaving it untouched.")
            return
        config = push_default_config(db)
        logger.info("Stored default form config (%d questions).", len(config.questions))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create database tables")
    parser.add_argument("--seed", action="store_true", help="Store the default form config when none exists")
    args = parser.parse_args()
    setup_db(seed=args.seed)
