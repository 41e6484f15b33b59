"""Message explorer — filtered and grouped views over an ``AnalysisResult``.

Provides the derived views a viewer needs without touching the parser:
- filter_messages: error / direction / free-text filtering
- group_mib_sequences: collapse MIB upload bursts into one group
- service_nodes: entities with and without inferred service links
- build_topology: ONU → class → instance tree from the stats
- vlan_tagging_rules: decoded ME 171 tagging table entries of one message
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from omcisight.models.analysis import (
    AnalysisResult,
    EntityStats,
    NodeType,
    ServiceLink,
    TopologyNode,
)
from omcisight.models.message import Direction, OmciMessage
from omcisight.models.vlan import VlanTaggingRule
from omcisight.parsers.vlan_table import decode_vlan_tagging_entry

MIB_MESSAGE_RE = re.compile(r"mib upload|mib next|mib reset", re.IGNORECASE)

VLAN_TAGGING_CLASS_ID = "171"  # Extended VLAN tagging operation configuration data
TABLE_HEX_RES = (
    re.compile(r"\(([0-9a-f]{32,})\)", re.IGNORECASE),
    re.compile(r"([0-9a-f]{32,})", re.IGNORECASE),
)


@dataclass
class MessageGroup:
    """A run of consecutive MIB messages shown as one row."""

    id: str
    messages: list[OmciMessage] = field(default_factory=list)

    @property
    def first_index(self) -> int:
        return self.messages[0].index

    @property
    def last_index(self) -> int:
        return self.messages[-1].index


@dataclass
class ServiceNodes:
    """Entities split by whether any service link touches them."""

    connected: list[ServiceLink] = field(default_factory=list)
    isolated: list[str] = field(default_factory=list)


def filter_messages(
    messages: list[OmciMessage],
    *,
    only_errors: bool = False,
    direction: Direction | None = None,
    search: str = "",
) -> list[OmciMessage]:
    """Return messages matching every given filter, sorted by index.

    ``search`` is matched case-insensitively against the class name, the
    instance id, and the message type.
    """
    needle = search.strip().lower()
    selected = []
    for msg in messages:
        if only_errors and not msg.is_error:
            continue
        if direction is not None and msg.direction is not direction:
            continue
        if needle and not (
            needle in msg.me_class_name.lower()
            or needle in msg.me_instance.lower()
            or needle in msg.message_type.lower()
        ):
            continue
        selected.append(msg)
    return sorted(selected, key=lambda m: m.index)


def failed_messages(result: AnalysisResult) -> list[OmciMessage]:
    return [m for m in result.messages if m.is_error]


def is_mib_message(message: OmciMessage) -> bool:
    return bool(MIB_MESSAGE_RE.search(message.message_type))


def group_mib_sequences(
    messages: list[OmciMessage],
) -> list[OmciMessage | MessageGroup]:
    """Collapse runs of two or more consecutive MIB messages into groups.

    A lone MIB message stays a plain row.
    """
    rows: list[OmciMessage | MessageGroup] = []
    run: list[OmciMessage] = []

    def flush(position: int) -> None:
        if len(run) > 1:
            rows.append(MessageGroup(id=f"group-{position}", messages=list(run)))
        else:
            rows.extend(run)
        run.clear()

    for position, msg in enumerate(messages):
        if is_mib_message(msg):
            run.append(msg)
            continue
        flush(position)
        rows.append(msg)
    flush(len(messages))
    return rows


def known_entities(stats: dict[str, EntityStats]) -> list[str]:
    """Every "Class (instance)" composite seen in the stats."""
    return [
        f"{name} ({instance})"
        for name, stat in stats.items()
        for instance in stat.instances
    ]


def service_nodes(result: AnalysisResult) -> ServiceNodes:
    """Split entities into linked ones and ones no service link reaches."""
    linked: set[str] = set()
    for link in result.service_model:
        linked.add(link.from_)
        linked.add(link.to)

    return ServiceNodes(
        connected=list(result.service_model),
        isolated=[e for e in known_entities(result.stats) if e not in linked],
    )


def find_entity_message(result: AnalysisResult, entity: str) -> OmciMessage | None:
    """First message addressed to a "Class (instance)" composite."""
    for msg in result.messages:
        if msg.entity == entity:
            return msg
    return None


def build_topology(stats: dict[str, EntityStats], root_name: str = "ONU Device") -> TopologyNode:
    """ONU root with one node per entity class and one leaf per instance."""
    classes = [
        TopologyNode(
            name=name,
            type=NodeType.BRIDGE,
            children=[
                TopologyNode(
                    name=f"Instance {instance}",
                    type=NodeType.GEM,
                    entity_id=f"{name} ({instance})",
                )
                for instance in stat.instances
            ],
        )
        for name, stat in stats.items()
    ]
    return TopologyNode(name=root_name, type=NodeType.ONU, children=classes)


# ---------------------------------------------------------------------------
# ME 171 tagging tables
# ---------------------------------------------------------------------------

def is_vlan_tagging_message(message: OmciMessage) -> bool:
    return (
        message.me_class == VLAN_TAGGING_CLASS_ID
        or "extended vlan" in message.me_class_name.lower()
    )


def _table_hex(value: str) -> str | None:
    for pattern in TABLE_HEX_RES:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


def vlan_tagging_rules(message: OmciMessage) -> list[tuple[str, VlanTaggingRule]]:
    """Decode every table attribute of an ME 171 message.

    Only attributes named like a table or attribute list whose value holds
    at least one 16-byte hex run are considered. Returns (attribute name,
    rule) pairs in attribute order.
    """
    if not is_vlan_tagging_message(message):
        return []

    rules = []
    for key, value in message.attributes.items():
        lowered = key.lower()
        if "table" not in lowered and "attribute list" not in lowered:
            continue
        hex_value = _table_hex(value)
        if hex_value is None:
            continue
        rule = decode_vlan_tagging_entry(hex_value)
        if rule is not None:
            rules.append((key, rule))
    return rules
