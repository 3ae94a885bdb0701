import pytest

from src.app_shell.config import ConfigError, validate_ops_rules
from src.rules.models import AppRules, OpsRules, Rules


def _rules(*required: str) -> Rules:
    return Rules(app=AppRules(site_url="https://x"), ops=OpsRules(required_env=list(required)))


def test_passes_when_env_present():
    validate_ops_rules(_rules("LUXE_SECRET_KEY"), {"LUXE_SECRET_KEY": "s"})


def test_lists_every_missing_variable():
    with pytest.raises(ConfigError) as exc:
        validate_ops_rules(_rules("A", "B", "C"), {"B": "1"})

    assert "A, C" in str(exc.value)


def test_nothing_required():
    validate_ops_rules(_rules(), {})
