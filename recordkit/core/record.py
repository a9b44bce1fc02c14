"""
Record: an ordered, name-unique collection of ValueCells.

A Record (data document) keeps its cells in insertion order, may own
named one-to-many relations to child Records, and can digest its content
into a stable hash used for identity and duplicate detection.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from recordkit.core.data import (
    FEATURE_IS_PRIMARY, VALIDATION_MESSAGE_ITEM_CHANGED,
)
from recordkit.core.features import FeatureMixin
from recordkit.core.hashing import ContentDigest
from recordkit.core.item import ValueCell
from recordkit.exceptions import NotFoundError


@dataclass
class ValidationResult:
    """
    Outcome of validating a Record.

    Attributes:
        violations: (item name, message) pairs of failing items
    """
    violations: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def messages(self) -> List[str]:
        return [f"{name}: {message}" for name, message in self.violations]

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass
class ComparisonResult:
    """
    Outcome of comparing the item values of two Records.

    Attributes:
        changed: Names of items that differ or are missing in the other record
        messages: One message per changed item
    """
    changed: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    @property
    def is_equal(self) -> bool:
        return not self.changed

    def __bool__(self) -> bool:
        return self.is_equal


class Record(FeatureMixin):
    """
    Ordered collection of ValueCells with child relations.

    Adding a cell whose name already exists replaces it in place. The
    content hash depends on insertion order, so two records holding the
    same cells in a different order hash differently.

    Example:
        person = Record("person")
        person.add(ValueCell.from_object("name", "Ada"))
        person.add(ValueCell.from_object("born", 1815))
        person.get_value_as_int("born")       # 1815
        person.generate_unique_hash(False)
    """

    def __init__(self, name: str, title: Optional[str] = None):
        """
        Initialize an empty Record.

        Args:
            name: Record name
            title: Display title
        """
        self._init_features()
        self.name = name
        self.title = title or ""
        self.action = ""
        self.items: Dict[str, ValueCell] = {}
        self.child_docs: Dict[str, List['Record']] = {}

    def copy(self) -> 'Record':
        """
        Clone the record.

        Items and child records are deep-copied; the feature map is
        copied as a flat dictionary and properties are not carried over.
        """
        clone = Record(self.name, self.title)
        clone.action = self.action
        for cell in self.items.values():
            clone.add(cell.copy())
        for relation, children in self.child_docs.items():
            for child in children:
                clone.add_child(child.copy(), relation)
        clone.features = dict(self.features)
        return clone

    # ========================================
    # Item Operations
    # ========================================

    def add(self, cell: ValueCell) -> None:
        """Add a cell; an existing cell with the same name is replaced."""
        self.items[cell.name] = cell

    def update(self, cell: ValueCell) -> None:
        self.items[cell.name] = cell

    def remove(self, name: str) -> bool:
        """
        Remove a cell by name.

        Returns:
            True if removed, False if not found
        """
        return self.items.pop(name, None) is not None

    def count(self) -> int:
        return len(self.items)

    def get_items(self) -> List[ValueCell]:
        return list(self.items.values())

    def item_names(self) -> List[str]:
        return list(self.items.keys())

    def get_item_by_name(self, name: str) -> ValueCell:
        """
        Look up a cell by name.

        Raises:
            NotFoundError: If no cell has that name
        """
        try:
            return self.items[name]
        except KeyError:
            raise NotFoundError(f"Record '{self.name}' has no item named '{name}'") from None

    def get_item_by_name_optional(self, name: str) -> Optional[ValueCell]:
        return self.items.get(name)

    def get_item_by_offset(self, offset: int) -> ValueCell:
        """
        Look up a cell by insertion position.

        Raises:
            NotFoundError: If the offset is out of range
        """
        if offset < 0 or offset >= len(self.items):
            raise NotFoundError(f"Record '{self.name}' has no item at offset {offset}")
        return list(self.items.values())[offset]

    def get_item_by_feature_enabled(self, feature: str) -> Optional[ValueCell]:
        """First cell whose feature is set to true."""
        for cell in self.items.values():
            if cell.is_feature_true(feature):
                return cell
        return None

    def get_items_by_feature_name(self, feature: str) -> List[ValueCell]:
        """All cells that carry a non-empty value for the feature."""
        return [cell for cell in self.items.values() if cell.get_feature(feature)]

    def get_first_item_by_feature_name(self, feature: str) -> Optional[ValueCell]:
        for cell in self.items.values():
            if cell.get_feature(feature):
                return cell
        return None

    def get_first_item_by_feature_name_with_value(self, feature: str) -> Optional[ValueCell]:
        for cell in self.items.values():
            if cell.get_feature(feature) and cell.is_value_assigned():
                return cell
        return None

    def primary_key_item(self) -> Optional[ValueCell]:
        """The first cell flagged with isPrimary, or None."""
        return self.get_first_item_by_feature_name(FEATURE_IS_PRIMARY)

    def feature_first_item_value(self, feature: str) -> str:
        """Value of the first cell with the feature and a non-empty value."""
        value = ""
        for cell in self.items.values():
            if cell.is_feature_assigned(feature):
                value = cell.get_value()
                if value:
                    break
        return value

    def feature_name_count(self, feature: str) -> int:
        return len(self.get_items_by_feature_name(feature))

    def feature_name_value_count(self, feature: str, value: str) -> int:
        count = 0
        for cell in self.items.values():
            assigned = cell.get_feature(feature)
            if assigned is not None and assigned.lower() == value.lower():
                count += 1
        return count

    def disable_item_feature(self, feature: str) -> None:
        """Remove a feature from every cell."""
        for cell in self.items.values():
            cell.disable_feature(feature)

    def clear_item_properties(self) -> None:
        for cell in self.items.values():
            cell.clear_properties()

    # ========================================
    # Values by name
    # ========================================

    def is_value_assigned(self, name: str) -> bool:
        cell = self.items.get(name)
        return cell is not None and cell.is_value_assigned()

    def set_value_by_name(self, name: str, value: Any) -> None:
        self.get_item_by_name(name).set_value(value)

    def set_values_by_name(self, name: str, values: List[Any]) -> None:
        self.get_item_by_name(name).set_values(values)

    def add_value_by_name(self, name: str, value: Any) -> None:
        self.get_item_by_name(name).add_value(value)

    def get_value_by_name(self, name: str) -> str:
        """First value of the named cell; empty when the cell is absent."""
        cell = self.items.get(name)
        return cell.get_value() if cell else ""

    def get_values_by_name(self, name: str) -> List[str]:
        cell = self.items.get(name)
        return list(cell.values) if cell else []

    def get_value_as_int(self, name: str) -> int:
        return self.get_item_by_name(name).get_value_as_int()

    def get_value_as_float(self, name: str) -> float:
        return self.get_item_by_name(name).get_value_as_float()

    def get_value_as_boolean(self, name: str) -> bool:
        return self.get_item_by_name(name).get_value_as_boolean()

    def get_value_as_datetime(self, name: str, data_format: Optional[str] = None):
        return self.get_item_by_name(name).get_value_as_datetime(data_format)

    def is_value_in(self, name: str, *candidates: str) -> bool:
        """True when the named cell holds any of the candidate values."""
        cell = self.items.get(name)
        if cell is None:
            return False
        return any(candidate in cell.values for candidate in candidates)

    def reset_values(self) -> None:
        """Clear every cell's values and drop all child records."""
        for cell in self.items.values():
            cell.clear_values()
        self.child_docs.clear()

    def reset_values_with_defaults(self) -> None:
        for cell in self.items.values():
            cell.clear_values()
            cell.assign_value_from_default()

    # ========================================
    # Child relations
    # ========================================

    def add_child(self, child: 'Record', relation: Optional[str] = None) -> None:
        """
        Attach a child record under a relation name.

        Args:
            child: Record to attach
            relation: Relation name, defaults to the child's name
        """
        relation = relation or child.name
        if not relation:
            return
        self.child_docs.setdefault(relation, []).append(child)

    def delete_child(self, relation: str) -> bool:
        return self.child_docs.pop(relation, None) is not None

    def children_count(self) -> int:
        return sum(len(children) for children in self.child_docs.values())

    def child_relations(self) -> List[str]:
        return list(self.child_docs.keys())

    def get_child_docs(self, relation: Optional[str] = None) -> List['Record']:
        """Children of one relation, or of all relations when none is given."""
        if relation is not None:
            return list(self.child_docs.get(relation, []))
        return [child for children in self.child_docs.values() for child in children]

    def get_first_child_doc(self, relation: str) -> Optional['Record']:
        children = self.child_docs.get(relation)
        return children[0] if children else None

    # ========================================
    # Hashing
    # ========================================

    def process_hash(self, digest: ContentDigest, include_features: bool) -> None:
        """
        Feed the record content into a digest, one cell at a time.

        Per cell: name, type, title, the cell's features (sorted by name)
        when requested, then the collapsed values. Delimiters inside a
        value are escaped, so ["a|b"] and ["a", "b"] digest differently.
        """
        for cell in self.items.values():
            digest.update(cell.name)
            digest.update(cell.type.value)
            digest.update(cell.title)
            if include_features:
                for feature_name in sorted(cell.features):
                    digest.update(feature_name)
                    digest.update(cell.features[feature_name])
            digest.update(cell.get_values_collapsed())

    def generate_unique_hash(self, include_features: bool = False) -> str:
        """
        Content digest of the record's cells in insertion order.

        Raises:
            HashUnavailableError: If the digest algorithm is not available
        """
        digest = ContentDigest()
        self.process_hash(digest, include_features)
        return digest.hexdigest()

    def hash_id(self) -> str:
        return self.generate_unique_hash(False)

    # ========================================
    # Validation and comparison
    # ========================================

    def validate(self) -> ValidationResult:
        """Validate every cell and collect the failing ones."""
        result = ValidationResult()
        for cell in self.items.values():
            message = cell.validate()
            if message is not None:
                result.violations.append((cell.name, message))
        return result

    def is_valid(self) -> bool:
        return self.validate().is_valid

    def validation_messages(self) -> List[str]:
        return self.validate().messages()

    def is_item_values_equal(self, other: 'Record') -> ComparisonResult:
        """
        Compare this record's cells, name by name, against another record.

        Returns:
            ComparisonResult listing the changed or missing items
        """
        result = ComparisonResult()
        for cell in self.items.values():
            other_cell = other.items.get(cell.name)
            if other_cell is None:
                result.changed.append(cell.name)
                result.messages.append(f"{cell.name}: Name does not exist")
            elif not other_cell.is_equal(cell):
                result.changed.append(cell.name)
                result.messages.append(f"{cell.name}: {VALIDATION_MESSAGE_ITEM_CHANGED}")
        return result

    def __eq__(self, other) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return (self.name == other.name
                and self.generate_unique_hash(True) == other.generate_unique_hash(True))

    def __hash__(self) -> int:
        return hash((self.name, self.generate_unique_hash(True)))

    def __iter__(self) -> Iterator[ValueCell]:
        return iter(list(self.items.values()))

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, name: str) -> bool:
        return name in self.items

    # ========================================
    # Encoding
    # ========================================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize items and child relations in insertion order."""
        return {
            'name': self.name,
            'title': self.title,
            'action': self.action,
            'features': dict(self.features),
            'items': [cell.to_dict() for cell in self.items.values()],
            'children': {
                relation: [child.to_dict() for child in children]
                for relation, children in self.child_docs.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Record':
        record = cls(data['name'], data.get('title'))
        record.action = data.get('action', "")
        record.features = dict(data.get('features', {}))
        for cell_data in data.get('items', []):
            record.add(ValueCell.from_dict(cell_data))
        for relation, children in data.get('children', {}).items():
            for child_data in children:
                record.add_child(cls.from_dict(child_data), relation)
        return record

    def __repr__(self) -> str:
        return f"Record(name={self.name}, items={len(self.items)}, children={self.children_count()})"
