"""Core ontology shared by every grafnote component.

This module holds the small vocabulary the rest of the package is written in:
string enumerations with flexible membership testing, the placeholder
sentinel that stands for "nothing selected / nothing available", and the
well-known property keys every node carries.

Key Components:
    - BaseEnum: Base class for string-based enumerations
    - PLACEHOLDER: The placeholder sentinel
    - TargetKind: What a pending edit is committed against

Example:
    >>> "node" in TargetKind  # True
    >>> is_placeholder(" ")  # True
    >>> placeholder_list()  # [" "]
"""

from enum import EnumMeta

from strenum import StrEnum

# Stands in for an empty candidate list so dependent controls always have a default.
PLACEHOLDER = " "

# Every node is identified by a decimal string stored under this key.
ID_KEY = "ID"
NAME_KEY = "name"


def is_placeholder(value: object) -> bool:
    """Return True if ``value`` is the placeholder sentinel."""
    return value == PLACEHOLDER


def placeholder_list() -> list[str]:
    """Return a fresh single-element placeholder list."""
    return [PLACEHOLDER]


class MetaEnum(EnumMeta):
    """Metaclass allowing ``value in SomeEnum`` for raw values."""

    def __contains__(self, member: object) -> bool:
        if isinstance(member, self):
            return True
        try:
            self(member)
            return True
        except ValueError:
            return False


class BaseEnum(StrEnum, metaclass=MetaEnum):
    """Base class for string-based enumerations."""

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return self.value


def _register_yaml_representer():
    """Serialize BaseEnum members as plain strings in YAML dumps."""
    import yaml

    def base_enum_representer(dumper, data):
        return dumper.represent_scalar("tag:yaml.org,2002:str", str(data.value))

    yaml.add_representer(BaseEnum, base_enum_representer)
    yaml.add_multi_representer(BaseEnum, base_enum_representer)


_register_yaml_representer()


class TargetKind(BaseEnum):
    """Target of a pending-edit commit.

    Attributes:
        NEW_NODE: Create a node; key is ``(node_type, node_id)``
        NODE: Update an existing node; key is ``(node_id,)``
        NEW_RELATIONSHIP: Create a relationship; key is ``(source_id, target_id, relationship_type)``
        RELATIONSHIP: Update an existing relationship; same key as NEW_RELATIONSHIP
    """

    NEW_NODE = "new_node"
    NODE = "node"
    NEW_RELATIONSHIP = "new_relationship"
    RELATIONSHIP = "relationship"


class EntityKind(BaseEnum):
    """Kind of graph entity a property editor is opened for."""

    NODE = "Node"
    RELATIONSHIP = "Relationship"
