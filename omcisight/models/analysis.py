"""Analysis result models — per-class statistics, service links, topology."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from omcisight.models.message import OmciMessage


class NodeType(str, Enum):
    """Kinds of node in a PON topology tree."""

    OLT = "OLT"
    ONU = "ONU"
    TCONT = "TCONT"
    GEM = "GEM"
    UNI = "UNI"
    BRIDGE = "BRIDGE"


class EntityStats(BaseModel):
    """Aggregate counters for one managed entity class."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    class_name: str
    count: int = 0
    instances: list[str] = Field(default_factory=list)  # First-seen order, no duplicates
    errors: int = 0


class ServiceLink(BaseModel):
    """Inferred reference from one managed entity to another."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")  # "Class (0x0001)"
    to: str  # Raw referenced value, e.g. "0x8001"
    label: str  # Attribute name that carried the reference


class TopologyNode(BaseModel):
    """Node in a topology tree."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    type: NodeType
    entity_id: str | None = None
    children: list[TopologyNode] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Everything reconstructed from one export."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    messages: list[OmciMessage] = Field(default_factory=list)  # Sorted by index
    stats: dict[str, EntityStats] = Field(default_factory=dict)
    service_model: list[ServiceLink] = Field(default_factory=list)  # Promotion order
    anomalies: list[str] = Field(default_factory=list)  # Filled by external consumers
    topology: TopologyNode
