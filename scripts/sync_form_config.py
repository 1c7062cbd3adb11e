"""
scripts/sync_form_config.py — Reconcile the stored form configuration with
the canonical questions.

Keeps custom questions, ordering and thresholds; adopts canonical wording,
options and conditional fields; folds legacy standalone follow-up questions
into their parent; recomputes maxScore.

Usage:
    python scripts/sync_form_config.py
    python scripts/sync_form_config.py --dry-run   # print the merged config, store nothing
"""

import sys
import os
import argparse
import json
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("sync_form_config")

from app.db.repository import get_stored_form_config
from app.db.session import get_session
from app.forms.validation import FormConfigError, collect_problems
from app.services.form_config_service import sync_form_config
from app.services.reconciler import reconcile_config


def run(dry_run: bool) -> int:
    with get_session() as db:
        if dry_run:
            merged = reconcile_config(get_stored_form_config(db))
            print(json.dumps(merged.to_json_dict(), indent=2, ensure_ascii=False))
            for problem in collect_problems(merged):
                logger.warning("Merged config would be rejected: %s", problem)
            return 0

        try:
            merged = sync_form_config(db)
        except FormConfigError as exc:
            for problem in exc.problems:
                logger.error("  - %s", problem)
            logger.error("Sync aborted; stored configuration left unchanged.")
            return 1

    print(f"✅ Form config synced: {len(merged.questions)} questions, maxScore={merged.max_score}, "
          f"thresholds={merged.thresholds.to_json_dict() if merged.thresholds else None}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Sync the stored form config with the canonical one.")
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the merged configuration without storing it",
    )
    args = parser.parse_args()
    sys.exit(run(dry_run=args.dry_run))


if __name__ == "__main__":
    main()
