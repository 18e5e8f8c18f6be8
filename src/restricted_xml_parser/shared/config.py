"""Configuration classes for restricted XML parsing.

This module provides configuration objects for the scanning, tree building,
query and document layers, plus an immutable aggregate used by the public API.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

DEFAULT_SCRATCH_CAPACITY = 200
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class ScannerConfig:
    """Configuration for the tag, attribute and text scanners."""

    scratch_capacity: int = DEFAULT_SCRATCH_CAPACITY
    max_input_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate scanner configuration."""
        if self.scratch_capacity <= 0:
            raise ConfigValidationError(
                "scratch_capacity must be > 0", field_name="scratch_capacity"
            )
        if self.max_input_bytes is not None and self.max_input_bytes <= 0:
            raise ConfigValidationError(
                "max_input_bytes must be > 0 or None", field_name="max_input_bytes"
            )


@dataclass
class TreeConfig:
    """Configuration for tree construction."""

    match_closing_names: bool = True
    max_tree_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_tree_depth is not None and self.max_tree_depth <= 0:
            raise ConfigValidationError(
                "max_tree_depth must be > 0 or None", field_name="max_tree_depth"
            )


@dataclass
class QueryConfig:
    """Configuration for path queries."""

    segment_capacity: int = DEFAULT_SCRATCH_CAPACITY

    def __post_init__(self) -> None:
        """Validate query configuration."""
        if self.segment_capacity <= 0:
            raise ConfigValidationError(
                "segment_capacity must be > 0", field_name="segment_capacity"
            )


@dataclass
class DocumentConfig:
    """Configuration for whole-document loading."""

    check_declaration: bool = True
    expected_declaration: str = XML_DECLARATION

    def __post_init__(self) -> None:
        """Validate document configuration."""
        if self.check_declaration and not self.expected_declaration:
            raise ConfigValidationError(
                "expected_declaration cannot be empty when check_declaration is set",
                field_name="expected_declaration",
            )


_COMPONENTS = {
    "scanner": ScannerConfig,
    "tree": TreeConfig,
    "query": QueryConfig,
    "document": DocumentConfig,
}


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for every parser component."""

    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)

    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        for component_name, component_class in _COMPONENTS.items():
            value = getattr(self, component_name)
            if not isinstance(value, component_class):
                raise ConfigValidationError(
                    f"{component_name} must be a {component_class.__name__}",
                    field_name=component_name,
                )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use ``component__field`` notation.

        Example:
            >>> config = ParserConfig().override(scanner__scratch_capacity=64)
            >>> config.scanner.scratch_capacity
            64
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=sorted(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        for component, overrides in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except TypeError as e:
                raise ConfigValidationError(str(e), field_name=component) from e
        new_fields.update(top_level)
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component_name in _COMPONENTS:
            component = getattr(self, component_name)
            result[component_name] = {
                name: getattr(component, name)
                for name in component.__dataclass_fields__
            }
        result["correlation_id"] = self.correlation_id
        result["name"] = self.name
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files surface.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _COMPONENTS:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"{key} must be a mapping", field_name=key
                    )
                try:
                    values[key] = _COMPONENTS[key](**value)
                except TypeError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("correlation_id", "name"):
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=sorted(list(_COMPONENTS) + ["correlation_id", "name"]),
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Closing names must match and trees are limited to a sane depth."""
        return cls(
            tree=TreeConfig(match_closing_names=True, max_tree_depth=256),
            name="strict",
        )

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Accept any closing tag name and larger names and values."""
        return cls(
            scanner=ScannerConfig(scratch_capacity=4096),
            tree=TreeConfig(match_closing_names=False),
            query=QueryConfig(segment_capacity=4096),
            document=DocumentConfig(check_declaration=False),
            name="lenient",
        )
