"""Tests for the configuration system."""

import json

import pytest

from restricted_xml_parser.shared.config import (
    DEFAULT_SCRATCH_CAPACITY,
    XML_DECLARATION,
    ConfigError,
    ConfigValidationError,
    DocumentConfig,
    ParserConfig,
    QueryConfig,
    ScannerConfig,
    TreeConfig,
)


class TestComponentConfigs:
    """Test suite for the per-layer configuration classes."""

    def test_scanner_defaults(self):
        """Test default scanner configuration values."""
        config = ScannerConfig()

        assert config.scratch_capacity == DEFAULT_SCRATCH_CAPACITY == 200
        assert config.max_input_bytes is None

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_scanner_rejects_non_positive_capacity(self, capacity):
        """Test that the scratch capacity must be positive."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ScannerConfig(scratch_capacity=capacity)
        assert exc_info.value.field_name == "scratch_capacity"

    def test_scanner_rejects_non_positive_budget(self):
        with pytest.raises(ConfigValidationError, match="max_input_bytes"):
            ScannerConfig(max_input_bytes=0)

    def test_tree_defaults_and_validation(self):
        """Test tree configuration defaults and depth validation."""
        config = TreeConfig()
        assert config.match_closing_names is True
        assert config.max_tree_depth is None

        with pytest.raises(ConfigValidationError):
            TreeConfig(max_tree_depth=0)

    def test_query_validation(self):
        assert QueryConfig().segment_capacity == 200
        with pytest.raises(ConfigValidationError):
            QueryConfig(segment_capacity=0)

    def test_document_defaults(self):
        """Test document configuration defaults."""
        config = DocumentConfig()

        assert config.check_declaration is True
        assert config.expected_declaration == XML_DECLARATION
        assert XML_DECLARATION == '<?xml version="1.0" encoding="UTF-8"?>'

    def test_document_requires_declaration_when_checking(self):
        with pytest.raises(ConfigValidationError):
            DocumentConfig(expected_declaration="")
        # Not checked, so an empty declaration is fine
        DocumentConfig(check_declaration=False, expected_declaration="")

    def test_validation_error_is_config_error(self):
        assert issubclass(ConfigValidationError, ConfigError)


class TestParserConfig:
    """Test suite for the aggregate ParserConfig."""

    def test_default_configuration(self):
        """Test default parser configuration."""
        config = ParserConfig()

        assert isinstance(config.scanner, ScannerConfig)
        assert isinstance(config.tree, TreeConfig)
        assert isinstance(config.query, QueryConfig)
        assert isinstance(config.document, DocumentConfig)
        assert config.correlation_id is None

    def test_configuration_is_immutable(self):
        """Test that ParserConfig is frozen."""
        config = ParserConfig()
        with pytest.raises(Exception):
            config.name = "changed"

    def test_rejects_wrong_component_type(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig(scanner=TreeConfig())

    def test_override_nested_fields(self):
        """Test overriding nested fields with component__field keys."""
        base = ParserConfig()
        config = base.override(
            scanner__scratch_capacity=64,
            tree__match_closing_names=False,
            correlation_id="abc",
        )

        assert config.scanner.scratch_capacity == 64
        assert config.tree.match_closing_names is False
        assert config.correlation_id == "abc"
        # Original is untouched
        assert base.scanner.scratch_capacity == 200
        assert base.tree.match_closing_names is True

    def test_override_validates_values(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(scanner__scratch_capacity=0)

    def test_override_unknown_component(self):
        """Test that unknown components are reported with suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(parser__anything=1)
        assert "scanner" in exc_info.value.suggestions

    def test_override_unknown_field(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(scanner__no_such_field=1)

    def test_dict_round_trip(self):
        """Test converting to a dictionary and back."""
        config = ParserConfig().override(query__segment_capacity=32, name="custom")
        restored = ParserConfig.from_dict(config.to_dict())

        assert restored == config

    def test_to_json_is_valid_json(self):
        data = json.loads(ParserConfig.lenient().to_json())
        assert data["scanner"]["scratch_capacity"] == 4096
        assert data["name"] == "lenient"

    def test_from_dict_rejects_unknown_keys(self):
        """Test that typos in configuration surface as errors."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig.from_dict({"scaner": {}})
        assert exc_info.value.field_name == "scaner"

    def test_from_dict_rejects_non_mapping_component(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"scanner": 5})

    def test_from_dict_rejects_unknown_component_field(self):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"tree": {"depth": 3}})

    def test_from_json(self):
        config = ParserConfig.from_json('{"tree": {"max_tree_depth": 8}}')
        assert config.tree.max_tree_depth == 8

    @pytest.mark.parametrize("text", ["not json", "[1, 2]"])
    def test_from_json_rejects_invalid_input(self, text):
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_json(text)


class TestPresets:
    """Test preset factory methods."""

    def test_default_preset(self):
        config = ParserConfig.default()
        assert config.name == "default"
        assert config.scanner == ScannerConfig()

    def test_strict_preset(self):
        """Test strict preset limits depth and matches closing names."""
        config = ParserConfig.strict()

        assert config.tree.match_closing_names is True
        assert config.tree.max_tree_depth == 256

    def test_lenient_preset(self):
        """Test lenient preset relaxes limits and checks."""
        config = ParserConfig.lenient()

        assert config.scanner.scratch_capacity == 4096
        assert config.query.segment_capacity == 4096
        assert config.tree.match_closing_names is False
        assert config.document.check_declaration is False
