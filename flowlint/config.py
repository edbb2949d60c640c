# flowlint/config.py
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, Tuple

import yaml

from flowlint.checks.findings import RULES, Severity
from flowlint.exceptions import ConfigError
from flowlint.utils.io import PathLike, load_any
from flowlint.utils.logger import get_logger

logger = get_logger("config")


@dataclass(frozen=True)
class RuleConfig:
    """
    Node classification tables and rule switches.

    Kind matching works on the lower-cased last segment of the node type,
    so "n8n-nodes-base.scheduleTrigger" is matched as "scheduletrigger".
    """
    # substring match: trigger-like / entry nodes
    trigger_keywords: Tuple[str, ...] = ("trigger", "webhook", "schedule", "cron")
    # exact match: legacy entry nodes without a trigger-ish name
    entry_kinds: Tuple[str, ...] = ("start", "interval")
    # exact match: contain "webhook"/"trigger" but are not entry points
    non_trigger_kinds: Tuple[str, ...] = ("respondtowebhook",)
    # exact match, plus any kind containing "condition"
    conditional_kinds: Tuple[str, ...] = ("if", "switch", "filter", "splitinbatches", "loopoveritems", "wait")
    error_trigger_kinds: Tuple[str, ...] = ("errortrigger",)
    # trigger kinds that never carry credentials
    credential_exempt_kinds: Tuple[str, ...] = (
        "manualtrigger", "scheduletrigger", "cron", "interval", "start",
        "errortrigger", "executeworkflowtrigger",
    )
    disabled_auth_values: Tuple[str, ...] = ("none", "noauth", "no_auth", "disabled", "off")
    disabled_rules: FrozenSet[str] = field(default_factory=frozenset)

    def is_enabled(self, rule: str) -> bool:
        return rule not in self.disabled_rules


DEFAULT_CONFIG = RuleConfig()

_TUPLE_FIELDS = {f.name for f in fields(RuleConfig) if f.name != "disabled_rules"}


def config_from_mapping(data: Dict[str, Any]) -> RuleConfig:
    """Overlay a mapping of field name -> list of strings onto the defaults."""
    if not isinstance(data, dict):
        raise ConfigError("rule configuration must be a mapping")

    unknown = sorted(set(data) - _TUPLE_FIELDS - {"disabled_rules"})
    if unknown:
        raise ConfigError(f"unknown configuration key(s): {', '.join(unknown)}")

    changes: Dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings")
        if key == "disabled_rules":
            changes[key] = frozenset(_check_rule_codes(value))
        else:
            changes[key] = tuple(v.lower() for v in value)

    return replace(DEFAULT_CONFIG, **changes)


def _check_rule_codes(codes):
    for code in codes:
        rule = RULES.get(code)
        if rule is None:
            raise ConfigError(f"unknown rule '{code}' in disabled_rules")
        if rule.severity is Severity.FATAL:
            raise ConfigError(f"rule '{code}' is fatal and cannot be disabled")
    return codes


def load_config(path: PathLike) -> RuleConfig:
    """Read a YAML or JSON rule configuration file."""
    try:
        data = load_any(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        # json.JSONDecodeError is a ValueError
        raise ConfigError(f"cannot read config {path}: {e}") from e
    if data is None:
        data = {}
    cfg = config_from_mapping(data)
    logger.debug("loaded config from %s (disabled rules: %s)", path, sorted(cfg.disabled_rules))
    return cfg
