"""Tests for validator configuration and TOML loading."""

import pytest

from apidl.core.config import (
    AttributeRule,
    ConfigError,
    SchemaConfig,
    default_config,
    load_config,
)


@pytest.fixture
def write_toml(tmp_path):
    def _write(content: str):
        path = tmp_path / "apidl.toml"
        path.write_text(content)
        return path

    return _write


class TestDefaultRegistry:
    """Tests for the built-in attribute rules."""

    def test_known_names(self):
        config = default_config()
        assert set(config.attributes) == {"Handle", "Drop", "derive", "traits", "flags", "manual"}
        assert config.receiver_name == "self"

    def test_struct_shape_rules(self):
        config = default_config()
        assert config.rule_for("Drop").requires_methods
        assert config.rule_for("Handle").warn_with_fields
        assert not config.rule_for("Handle").requires_methods

    def test_targets(self):
        config = default_config()
        assert config.rule_for("flags").targets == frozenset({"enum"})
        assert config.rule_for("manual").targets == frozenset({"method"})
        assert "union" in config.rule_for("derive").targets

    def test_unknown_name(self):
        assert default_config().rule_for("Nope") is None

    def test_with_rule_returns_copy(self):
        base = default_config()
        extended = base.with_rule("Singleton", AttributeRule(targets=frozenset({"struct"})))
        assert extended.rule_for("Singleton") is not None
        assert base.rule_for("Singleton") is None
        assert extended.receiver_name == base.receiver_name


class TestAttributeRule:
    """Tests for arity checking."""

    @pytest.mark.parametrize(
        "min_args,max_args,count,accepted",
        [
            (0, 0, 0, True),
            (0, 0, 1, False),
            (1, 1, 1, True),
            (1, 1, 0, False),
            (1, 1, 2, False),
            (1, None, 1, True),
            (1, None, 9, True),
            (1, None, 0, False),
            (2, 3, 3, True),
        ],
    )
    def test_accepts_arity(self, min_args, max_args, count, accepted):
        rule = AttributeRule(targets=frozenset({"struct"}), min_args=min_args, max_args=max_args)
        assert rule.accepts_arity(count) is accepted

    @pytest.mark.parametrize(
        "min_args,max_args,text",
        [
            (0, 0, "no arguments"),
            (1, 1, "exactly 1 argument"),
            (2, 2, "exactly 2 arguments"),
            (1, None, "at least 1 argument"),
            (0, None, "at least 0 arguments"),
            (1, 3, "1 to 3 arguments"),
        ],
    )
    def test_describe_arity(self, min_args, max_args, text):
        rule = AttributeRule(targets=frozenset({"enum"}), min_args=min_args, max_args=max_args)
        assert rule.describe_arity() == text

    def test_rule_is_frozen(self):
        rule = AttributeRule(targets=frozenset({"struct"}))
        with pytest.raises(AttributeError):
            rule.min_args = 3


class TestLoadConfig:
    """Tests for reading rules from TOML."""

    def test_adds_new_rule(self, write_toml):
        path = write_toml(
            """
[attributes.Singleton]
targets = ["struct"]
max_args = 0
"""
        )
        config = load_config(path)
        rule = config.rule_for("Singleton")
        assert rule.targets == frozenset({"struct"})
        assert rule.accepts_arity(0)
        assert config.rule_for("Handle") is not None

    def test_override_inherits_unset_fields(self, write_toml):
        path = write_toml(
            """
[attributes.derive]
targets = ["struct", "callback"]
"""
        )
        rule = load_config(path).rule_for("derive")
        assert rule.targets == frozenset({"struct", "callback"})
        assert rule.min_args == 1
        assert rule.max_args is None

    def test_override_keeps_targets(self, write_toml):
        path = write_toml("[attributes.Drop]\nrequires_methods = false\n")
        rule = load_config(path).rule_for("Drop")
        assert rule.targets == frozenset({"struct"})
        assert not rule.requires_methods

    def test_negative_max_means_unbounded(self, write_toml):
        path = write_toml('[attributes.tags]\ntargets = ["enum"]\nmax_args = -1\n')
        assert load_config(path).rule_for("tags").max_args is None

    def test_receiver_name(self, write_toml):
        path = write_toml('[validator]\nreceiver_name = "this"\n')
        assert load_config(path).receiver_name == "this"

    def test_empty_file_gives_base(self, write_toml):
        config = load_config(write_toml(""))
        assert config.attributes == default_config().attributes

    def test_explicit_base(self, write_toml):
        path = write_toml('[attributes.only]\ntargets = ["method"]\n')
        config = load_config(path, base=SchemaConfig())
        assert set(config.attributes) == {"only"}

    def test_accepts_str_path(self, write_toml):
        path = write_toml('[validator]\nreceiver_name = "me"\n')
        assert load_config(str(path)).receiver_name == "me"

    def test_missing_targets(self, write_toml):
        path = write_toml("[attributes.Bare]\nmax_args = 1\n")
        with pytest.raises(ConfigError, match="at least one target"):
            load_config(path)

    def test_unknown_target(self, write_toml):
        path = write_toml('[attributes.Odd]\ntargets = ["field", "struct"]\n')
        with pytest.raises(ConfigError, match="unknown target.*field"):
            load_config(path)

    def test_rule_must_be_table(self, write_toml):
        path = write_toml('[attributes]\nHandle = "yes"\n')
        with pytest.raises(ConfigError, match=r"\[attributes.Handle\] must be a table"):
            load_config(path)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
