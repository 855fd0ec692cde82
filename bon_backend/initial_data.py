import logging

from bon_backend.services.rules_service import load_rules, seed_rule_settings
from bon_backend.utils.database import SessionLocal

logger = logging.getLogger(__name__)


def init_seed():
    """Seed default bon rule settings and fail fast on an invalid configuration."""
    db = SessionLocal()
    try:
        seed_rule_settings(db)
        rules = load_rules(db)
        logger.info("effective bon rules: %s", rules.as_dict())
    finally:
        db.close()
