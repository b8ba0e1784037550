"""
Validator configuration for APIDL schemas.

The attribute registry is an explicit table passed to the validator, so
projects can add their own attributes without touching the engine. Extra
rules are read from a TOML file:

    [attributes.Singleton]
    targets = ["struct"]
    max_args = 0

    [attributes.derive]
    targets = ["struct", "enum", "union", "callback"]
    min_args = 1
"""

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Declaration kinds an attribute may target, plus "method"
ATTRIBUTE_TARGETS = frozenset({"struct", "enum", "union", "alias", "const", "callback", "method"})


class ConfigError(ValueError):
    """Raised when a configuration file is malformed."""


@dataclass(frozen=True)
class AttributeRule:
    """
    Placement and arity rule for one attribute name.

    Attributes:
        targets: Declaration kinds (or "method") the attribute may appear on
        min_args: Minimum number of arguments
        max_args: Maximum number of arguments (None for unbounded)
        requires_methods: The struct must declare at least one method
        warn_with_fields: Warn when the struct also declares fields
    """

    targets: frozenset[str]
    min_args: int = 0
    max_args: int | None = 0
    requires_methods: bool = False
    warn_with_fields: bool = False

    def accepts_arity(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    def describe_arity(self) -> str:
        """Human-readable argument count, e.g. "no arguments"."""
        if self.max_args == 0:
            return "no arguments"
        if self.max_args is None:
            return f"at least {self.min_args} argument{'s' if self.min_args != 1 else ''}"
        if self.min_args == self.max_args:
            return f"exactly {self.min_args} argument{'s' if self.min_args != 1 else ''}"
        return f"{self.min_args} to {self.max_args} arguments"


@dataclass
class SchemaConfig:
    """
    Settings consumed by the validator.

    Attributes:
        attributes: Recognized attribute names and their rules
        receiver_name: Parameter name treated as an explicit receiver
    """

    attributes: dict[str, AttributeRule] = field(default_factory=dict)
    receiver_name: str = "self"

    def rule_for(self, name: str) -> AttributeRule | None:
        return self.attributes.get(name)

    def with_rule(self, name: str, rule: AttributeRule) -> "SchemaConfig":
        """Return a copy of this config with one rule added or replaced."""
        return replace(self, attributes={**self.attributes, name: rule})


def default_config() -> SchemaConfig:
    """Return the built-in attribute registry."""
    return SchemaConfig(
        attributes={
            "Handle": AttributeRule(targets=frozenset({"struct"}), warn_with_fields=True),
            "Drop": AttributeRule(targets=frozenset({"struct"}), requires_methods=True),
            "derive": AttributeRule(
                targets=frozenset({"struct", "enum", "union"}), min_args=1, max_args=None
            ),
            "traits": AttributeRule(targets=frozenset({"struct"}), min_args=1, max_args=None),
            "flags": AttributeRule(targets=frozenset({"enum"}), min_args=1, max_args=1),
            "manual": AttributeRule(targets=frozenset({"method"})),
        }
    )


def _parse_rule(name: str, data: dict[str, Any], base: AttributeRule | None) -> AttributeRule:
    targets = data.get("targets", sorted(base.targets) if base else None)
    if not targets:
        raise ConfigError(f"Attribute '{name}' must list at least one target")
    unknown = set(targets) - ATTRIBUTE_TARGETS
    if unknown:
        raise ConfigError(
            f"Attribute '{name}' has unknown target(s): {', '.join(sorted(unknown))}"
        )

    defaults = base or AttributeRule(targets=frozenset(targets))
    max_args = data.get("max_args", defaults.max_args)
    if max_args is not None and max_args < 0:
        max_args = None  # negative means unbounded

    return AttributeRule(
        targets=frozenset(targets),
        min_args=int(data.get("min_args", defaults.min_args)),
        max_args=max_args,
        requires_methods=bool(data.get("requires_methods", defaults.requires_methods)),
        warn_with_fields=bool(data.get("warn_with_fields", defaults.warn_with_fields)),
    )


def load_config(path: Path | str, base: SchemaConfig | None = None) -> SchemaConfig:
    """
    Load validator settings from a TOML file.

    Rules in ``[attributes.<Name>]`` tables are merged over ``base``
    (the default registry when omitted); a rule for an existing name
    inherits any setting it does not override.

    Args:
        path: Path to the TOML file
        base: Config to extend

    Returns:
        The merged SchemaConfig

    Raises:
        ConfigError: If a rule is malformed
    """
    path = Path(path)
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = base or default_config()
    attributes = dict(config.attributes)

    for name, rule_data in data.get("attributes", {}).items():
        if not isinstance(rule_data, dict):
            raise ConfigError(f"[attributes.{name}] must be a table")
        attributes[name] = _parse_rule(name, rule_data, attributes.get(name))

    receiver_name = data.get("validator", {}).get("receiver_name", config.receiver_name)

    logger.debug("Loaded %d attribute rules from %s", len(attributes), path)
    return SchemaConfig(attributes=attributes, receiver_name=receiver_name)
