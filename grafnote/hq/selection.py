"""Selection state machine for the editor's cascading choices.

The editor shows chains of mutually dependent choices. Each field draws its
options from the fields upstream of it:

    current node        NODE_TYPE -> NODE_NAME -> NODE_ID -> PROPERTY -> PROPERTY_VALUE
    current relation    NODE_TYPE -> RELATIONSHIP -> RELATIONSHIP_PROPERTY
                        NODE_ID + PEER_ID + RELATIONSHIP + RELATIONSHIP_PROPERTY
                            -> RELATIONSHIP_VALUE
    reachable peer      RELATIONSHIP -> PEER_TYPE -> PEER_NAME -> PEER_ID
    new relationship    NODE_TYPE -> CREATE_RELATIONSHIP -> CREATE_RELATIONSHIP_PROPERTY
                        CREATE_RELATIONSHIP -> TARGET_TYPE -> TARGET_NAME -> TARGET_ID
    new node            NEW_NODE_TYPE -> NEW_NODE_PROPERTY

A change to one field is applied in a single pass: every field reachable from
it is recomputed in topological order, each one re-deriving its options from
the new upstream values and then selecting its first option. A field whose
upstream holds the placeholder gets the placeholder without any query. The
result is a new ``SelectionState``; states are never modified in place.

Example:
    >>> state = initial_state(browser)
    >>> state = recompute(state, SelectionField.NODE_TYPE, "Person", browser)
    >>> state.value(SelectionField.NODE_NAME)
    'Alice'
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from graphlib import TopologicalSorter
from typing import NamedTuple

from pydantic import ConfigDict, Field as PydanticField

from grafnote.architecture.base import ConfigBaseModel
from grafnote.onto import BaseEnum, is_placeholder, placeholder_list
from grafnote.query.browser import GraphBrowser

logger = logging.getLogger(__name__)


class InvalidSelection(ValueError):
    """A value was selected that is not among the field's options."""


class SelectionField(BaseEnum):
    """User-facing choices tracked by the state machine."""

    NODE_TYPE = "node_type"
    NODE_NAME = "node_name"
    NODE_ID = "node_id"
    PROPERTY = "property"
    PROPERTY_VALUE = "property_value"
    RELATIONSHIP = "relationship"
    RELATIONSHIP_PROPERTY = "relationship_property"
    RELATIONSHIP_VALUE = "relationship_value"
    PEER_TYPE = "peer_type"
    PEER_NAME = "peer_name"
    PEER_ID = "peer_id"
    CREATE_RELATIONSHIP = "create_relationship"
    CREATE_RELATIONSHIP_PROPERTY = "create_relationship_property"
    TARGET_TYPE = "target_type"
    TARGET_NAME = "target_name"
    TARGET_ID = "target_id"
    NEW_NODE_TYPE = "new_node_type"
    NEW_NODE_PROPERTY = "new_node_property"


class FieldRule(NamedTuple):
    """How a field derives its options.

    Attributes:
        inputs: Upstream fields passed, in order, to ``candidates``
        candidates: Browser lookup producing the options
        after: Upstream fields that trigger a recompute without being inputs
    """

    inputs: tuple[SelectionField, ...]
    candidates: Callable[..., list[str]]
    after: tuple[SelectionField, ...] = ()

    @property
    def upstream(self) -> tuple[SelectionField, ...]:
        return self.inputs + self.after


F = SelectionField

RULES: dict[SelectionField, FieldRule] = {
    F.NODE_TYPE: FieldRule((), GraphBrowser.node_types),
    F.NODE_NAME: FieldRule((F.NODE_TYPE,), GraphBrowser.node_names),
    F.NODE_ID: FieldRule((F.NODE_TYPE, F.NODE_NAME), GraphBrowser.node_ids),
    F.PROPERTY: FieldRule((F.NODE_ID,), GraphBrowser.node_property_names),
    F.PROPERTY_VALUE: FieldRule(
        (F.NODE_ID, F.PROPERTY), GraphBrowser.node_property_value
    ),
    F.RELATIONSHIP: FieldRule((F.NODE_TYPE,), GraphBrowser.relationship_types),
    F.RELATIONSHIP_PROPERTY: FieldRule(
        (F.RELATIONSHIP,), GraphBrowser.relationship_property_names
    ),
    F.PEER_TYPE: FieldRule((F.RELATIONSHIP,), GraphBrowser.target_node_types),
    F.PEER_NAME: FieldRule(
        (F.NODE_ID, F.RELATIONSHIP), GraphBrowser.peer_names, after=(F.PEER_TYPE,)
    ),
    F.PEER_ID: FieldRule(
        (F.NODE_ID, F.RELATIONSHIP, F.PEER_NAME), GraphBrowser.peer_ids
    ),
    F.RELATIONSHIP_VALUE: FieldRule(
        (F.NODE_ID, F.PEER_ID, F.RELATIONSHIP, F.RELATIONSHIP_PROPERTY),
        GraphBrowser.relationship_property_value,
    ),
    F.CREATE_RELATIONSHIP: FieldRule((F.NODE_TYPE,), GraphBrowser.relationship_types),
    F.CREATE_RELATIONSHIP_PROPERTY: FieldRule(
        (F.CREATE_RELATIONSHIP,), GraphBrowser.relationship_property_names
    ),
    F.TARGET_TYPE: FieldRule(
        (F.CREATE_RELATIONSHIP,), GraphBrowser.target_node_types
    ),
    F.TARGET_NAME: FieldRule((F.TARGET_TYPE,), GraphBrowser.node_names),
    F.TARGET_ID: FieldRule((F.TARGET_TYPE, F.TARGET_NAME), GraphBrowser.node_ids),
    F.NEW_NODE_TYPE: FieldRule((), GraphBrowser.node_types),
    F.NEW_NODE_PROPERTY: FieldRule((F.NEW_NODE_TYPE,), GraphBrowser.property_names),
}

# Fields in dependency order; every field comes after all of its upstream fields.
ORDER: tuple[SelectionField, ...] = tuple(
    TopologicalSorter({f: rule.upstream for f, rule in RULES.items()}).static_order()
)

DOWNSTREAM: dict[SelectionField, tuple[SelectionField, ...]] = {
    f: tuple(g for g in ORDER if f in RULES[g].upstream) for f in ORDER
}


def descendants(field: SelectionField | str) -> tuple[SelectionField, ...]:
    """Every field reachable from ``field``, in dependency order."""
    field = SelectionField(field)
    reached: set[SelectionField] = set()
    stack = [field]
    while stack:
        for child in DOWNSTREAM[stack.pop()]:
            if child not in reached:
                reached.add(child)
                stack.append(child)
    return tuple(f for f in ORDER if f in reached)


class Choice(ConfigBaseModel):
    """Options of one field and the selected option."""

    model_config = ConfigDict(frozen=True)

    options: tuple[str, ...]
    selected: str

    @property
    def is_valid(self) -> bool:
        return self.selected in self.options or is_placeholder(self.selected)


class SelectionState(ConfigBaseModel):
    """Immutable snapshot of every field's options and selection."""

    model_config = ConfigDict(frozen=True)

    choices: dict[str, Choice] = PydanticField(
        default_factory=dict,
        description="Field value -> choice, for every SelectionField.",
    )

    def __getitem__(self, field: SelectionField | str) -> Choice:
        return self.choices[SelectionField(field).value]

    def value(self, field: SelectionField | str) -> str:
        return self[field].selected

    def options(self, field: SelectionField | str) -> tuple[str, ...]:
        return self[field].options

    def values(self) -> dict[str, str]:
        return {k: c.selected for k, c in self.choices.items()}

    @property
    def is_consistent(self) -> bool:
        """True if every field is present and selects one of its options."""
        return all(f.value in self.choices for f in ORDER) and all(
            c.is_valid for c in self.choices.values()
        )


def _options(
    field: SelectionField, selected: dict[str, str], browser: GraphBrowser
) -> list[str]:
    rule = RULES[field]
    if any(is_placeholder(selected[f.value]) for f in rule.upstream):
        return placeholder_list()
    args = [selected[f.value] for f in rule.inputs]
    options = rule.candidates(browser, *args)
    return options if options else placeholder_list()


def _propagate(
    choices: dict[str, Choice],
    fields: Iterable[SelectionField],
    browser: GraphBrowser,
    keep: bool = False,
) -> SelectionState:
    selected = {k: c.selected for k, c in choices.items()}
    for field in fields:
        options = _options(field, selected, browser)
        current = selected.get(field.value)
        pick = current if keep and current in options else options[0]
        choices[field.value] = Choice(options=tuple(options), selected=pick)
        selected[field.value] = pick
    return SelectionState(choices=choices)


def initial_state(browser: GraphBrowser) -> SelectionState:
    """Compute every field from scratch, selecting first options."""
    return _propagate({}, ORDER, browser)


def recompute(
    state: SelectionState,
    field: SelectionField | str,
    value: str,
    browser: GraphBrowser,
) -> SelectionState:
    """Select ``value`` for ``field`` and recompute everything downstream.

    Args:
        state: Current state
        field: Field the user changed
        value: New selection; one of the field's options or the placeholder
        browser: Lookups for the recomputed fields

    Returns:
        SelectionState: New consistent state

    Raises:
        InvalidSelection: If ``value`` is not a valid choice for ``field``
    """
    field = SelectionField(field)
    choice = state[field]
    if value not in choice.options and not is_placeholder(value):
        raise InvalidSelection(f"{value!r} is not an option for {field}")
    choices = dict(state.choices)
    choices[field.value] = Choice(options=choice.options, selected=value)
    downstream = descendants(field)
    logger.debug(f"Selected {field}={value!r}, recomputing {len(downstream)} fields")
    return _propagate(choices, downstream, browser)


def refresh(
    state: SelectionState,
    browser: GraphBrowser,
    fields: Iterable[SelectionField | str] | None = None,
) -> SelectionState:
    """Re-derive ``fields`` and their descendants after the data changed.

    Unlike ``recompute``, selections that are still options are kept; only
    fields whose selection disappeared fall back to their first option.
    Without ``fields`` the whole state is refreshed.
    """
    if fields is None:
        targets = set(ORDER)
    else:
        targets = set()
        for f in fields:
            f = SelectionField(f)
            targets.add(f)
            targets.update(descendants(f))
    ordered = [f for f in ORDER if f in targets]
    return _propagate(dict(state.choices), ordered, browser, keep=True)
