"""
Tests for the rules loader and schema.
"""

from pathlib import Path

import pytest

from src.components.safe_exec import RetryPolicyRegistry
from src.rules.loader import load_rules


def test_project_rules_load(rules):
    assert rules.app.site_url == "https://naomi-luxe.com"
    assert rules.app.currency_symbol == "₦"
    assert rules.logging.flush_interval_ms == 5000
    assert rules.logging.max_buffer == 50
    assert rules.auth.algorithm == "HS256"


def test_project_retry_rules(rules):
    registry = RetryPolicyRegistry.from_rules(rules.retry)

    logs = registry.for_service("logs-getAll")
    assert (logs.retries, logs.delay_ms) == (2, 1000)

    email = registry.for_service("email")
    assert email.exponential_backoff is True
    assert email.timeout_ms == 10000

    assert registry.for_service("bookings-create").retries == 1
    assert registry.for_service("gallery-list").retries == 0


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("app: [unclosed", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_unknown_top_level_key_rejected(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("app:\n  site_url: https://x\nsurprise: 1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(path)


def test_negative_retries_rejected(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        "app:\n  site_url: https://x\nretry:\n  default:\n    retries: -1\n", encoding="utf-8"
    )

    with pytest.raises(ValueError):
        load_rules(path)


def test_minimal_rules_use_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("app:\n  site_url: https://x\n", encoding="utf-8")

    rules = load_rules(path)

    assert rules.retry.services == {}
    assert rules.logging.max_inflight_batches == 8
    assert rules.ops.required_env == []


def test_fenced_yaml_block(tmp_path):
    path = tmp_path / "rules.md"
    path.write_text(
        "# Rules\n\nSome prose.\n\n```yaml\napp:\n  site_url: https://fenced\n```\n",
        encoding="utf-8",
    )

    assert load_rules(Path(path)).app.site_url == "https://fenced"
