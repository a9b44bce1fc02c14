"""
Feature and property maps shared by cells, records, grids and graphs.

Features are persistent string settings; a flag is a feature whose value
is "true". Properties are transient objects that never take part in
hashing, equality or serialization.
"""

from typing import Any, Dict, Optional

from recordkit.core.data import FEATURE_TRUE, string_to_boolean


class FeatureMixin:
    """Adds a ``features`` and a ``properties`` map to its host."""

    def _init_features(self) -> None:
        self.features: Dict[str, str] = {}
        self.properties: Dict[str, Any] = {}

    # ========================================
    # Features
    # ========================================

    def add_feature(self, name: str, value: Any) -> None:
        """Assign a feature; booleans and numbers are stored as strings."""
        if isinstance(value, bool):
            value = "true" if value else "false"
        self.features[name] = str(value)

    def enable_feature(self, name: str) -> None:
        self.features[name] = FEATURE_TRUE

    def disable_feature(self, name: str) -> None:
        self.features.pop(name, None)

    def is_feature_true(self, name: str) -> bool:
        return string_to_boolean(self.features.get(name))

    def is_feature_assigned(self, name: str) -> bool:
        return name in self.features

    def get_feature(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.features.get(name, default)

    def get_feature_as_int(self, name: str, default: int = 0) -> int:
        try:
            return int(self.features[name])
        except (KeyError, ValueError):
            return default

    def copy_features(self, other: 'FeatureMixin') -> None:
        """Replace this object's features with a copy of another's."""
        self.features = dict(other.features)

    def clear_features(self) -> None:
        self.features.clear()

    # ========================================
    # Properties
    # ========================================

    def add_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def delete_property(self, name: str) -> None:
        self.properties.pop(name, None)

    def clear_properties(self) -> None:
        self.properties.clear()
