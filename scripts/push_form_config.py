"""
scripts/push_form_config.py — Overwrite the stored form configuration with
the canonical one.

Unlike sync_form_config.py this discards custom questions and thresholds.

Usage:
    python scripts/push_form_config.py
"""

import sys
import os
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from app.db.session import get_session
from app.services.form_config_service import push_default_config


def main():
    with get_session() as db:
        config = push_default_config(db)
    print(f"✅ Form config updated: {len(config.questions)} questions, maxScore={config.max_score}")


if __name__ == "__main__":
    main()
