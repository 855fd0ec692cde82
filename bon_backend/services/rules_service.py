import logging

from sqlalchemy.orm import Session

from bon_backend.core.exceptions import ConfigError
from bon_backend.core.rules import BonRules, RULE_DESCRIPTIONS, SETTING_PREFIX
from bon_backend.models.system_settings_model import SystemSetting

logger = logging.getLogger(__name__)


def is_rule_key(key: str) -> bool:
    return key.startswith(SETTING_PREFIX) and key[len(SETTING_PREFIX):] in RULE_DESCRIPTIONS


def _is_set(value) -> bool:
    return value is not None and str(value).strip() != ""


def _rule_rows(db: Session) -> dict:
    """Explicit overrides only; a blank row inherits the env / default value."""
    rows = db.query(SystemSetting).filter(SystemSetting.key.like(f"{SETTING_PREFIX}%")).all()
    return {r.key[len(SETTING_PREFIX):]: r.value for r in rows if _is_set(r.value)}


def load_rules(db: Session) -> BonRules:
    """Defaults <- BON_* env <- non-blank bon.* settings rows, validated."""
    return BonRules.from_env().with_overrides(_rule_rows(db)).validate()


def check_rule_change(db: Session, key: str, value: str) -> BonRules:
    """Validate the rules as they would be after writing ``key=value``.

    A blank value clears the override.
    """
    if not is_rule_key(key):
        raise ConfigError(key, "unknown bon rule")
    name = key[len(SETTING_PREFIX):]
    values = _rule_rows(db)
    if _is_set(value):
        values[name] = value
    else:
        values.pop(name, None)
    return BonRules.from_env().with_overrides(values).validate()


def seed_rule_settings(db: Session) -> int:
    """Insert missing bon.* rows, blank so they inherit. Returns rows added."""
    existing = {r.key for r in db.query(SystemSetting.key).all()}

    added = 0
    for name, description in RULE_DESCRIPTIONS.items():
        key = SETTING_PREFIX + name
        if key in existing:
            continue
        db.add(SystemSetting(key=key, value="", description=description))
        added += 1

    db.commit()
    if added:
        logger.info("seeded %d bon rule settings", added)
    return added
