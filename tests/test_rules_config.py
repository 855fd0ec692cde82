from decimal import Decimal

import pytest

from bon_backend.core.exceptions import ConfigError
from bon_backend.core.rules import BonRules
from bon_backend.models.system_settings_model import SystemSetting
from bon_backend.services.rules_service import check_rule_change, load_rules, seed_rule_settings


def test_defaults():
    rules = BonRules().validate()
    assert rules.max_bon_percentage == Decimal("80")
    assert rules.max_bon_amount == Decimal("10000000")
    assert (rules.min_installment_period, rules.max_installment_period) == (3, 24)
    assert rules.max_active_bon_per_employee == 1
    assert rules.min_employment_duration == 6
    assert rules.max_installment_percentage == Decimal("30")
    assert rules.min_time_between_applications == 1
    assert rules.employment_month_policy == "days30"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"max_bon_amount": "-1"}, "max_bon_amount"),
        ({"max_bon_percentage": "0"}, "max_bon_percentage"),
        ({"max_installment_percentage": "120"}, "max_installment_percentage"),
        ({"min_installment_period": "12", "max_installment_period": "6"}, "max_installment_period"),
        ({"max_active_bon_per_employee": "0"}, "max_active_bon_per_employee"),
        ({"min_employment_duration": "-3"}, "min_employment_duration"),
        ({"employment_month_policy": "lunar"}, "employment_month_policy"),
        ({"max_bon_amount": "NaN"}, "max_bon_amount"),
    ],
)
def test_out_of_range_values_raise_config_error(overrides, field):
    with pytest.raises(ConfigError) as exc_info:
        BonRules().with_overrides(overrides).validate()
    assert exc_info.value.field == field


def test_unparseable_value_raises_config_error():
    with pytest.raises(ConfigError):
        BonRules().with_overrides({"min_installment_period": "three"})


def test_unknown_keys_are_ignored():
    rules = BonRules().with_overrides({"something_else": "1"})
    assert rules == BonRules()


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("BON_MAX_BON_PERCENTAGE", "50")
    monkeypatch.setenv("BON_EMPLOYMENT_MONTH_POLICY", "calendar")
    rules = BonRules.from_env()
    assert rules.max_bon_percentage == Decimal("50")
    assert rules.employment_month_policy == "calendar"


def test_invalid_env_is_rejected_at_load(monkeypatch):
    monkeypatch.setenv("BON_MAX_BON_AMOUNT", "-5")
    with pytest.raises(ConfigError):
        BonRules.from_env()


def test_settings_rows_override_env(db, monkeypatch):
    monkeypatch.setenv("BON_MIN_EMPLOYMENT_DURATION", "3")
    db.add(SystemSetting(key="bon.min_employment_duration", value="12"))
    db.commit()

    assert load_rules(db).min_employment_duration == 12


def test_seed_is_idempotent(db):
    assert seed_rule_settings(db) == 9
    assert seed_rule_settings(db) == 0
    assert load_rules(db) == BonRules()


def test_env_still_applies_after_seeding(db, monkeypatch):
    seed_rule_settings(db)
    monkeypatch.setenv("BON_MAX_BON_AMOUNT", "5000000")

    assert load_rules(db).max_bon_amount == Decimal("5000000")


def test_blank_row_clears_override(db, monkeypatch):
    monkeypatch.setenv("BON_MAX_ACTIVE_BON_PER_EMPLOYEE", "2")
    db.add(SystemSetting(key="bon.max_active_bon_per_employee", value="3"))
    db.commit()
    assert load_rules(db).max_active_bon_per_employee == 3

    assert check_rule_change(db, "bon.max_active_bon_per_employee", " ").max_active_bon_per_employee == 2
    db.query(SystemSetting).filter(SystemSetting.key == "bon.max_active_bon_per_employee").update({"value": ""})
    db.commit()
    assert load_rules(db).max_active_bon_per_employee == 2


def test_check_rule_change_validates_the_combined_rules(db):
    seed_rule_settings(db)
    with pytest.raises(ConfigError):
        check_rule_change(db, "bon.min_installment_period", "30")
    assert check_rule_change(db, "bon.min_installment_period", "6").min_installment_period == 6


def test_check_rule_change_rejects_unknown_rule(db):
    with pytest.raises(ConfigError):
        check_rule_change(db, "bon.max_coffee", "2")
