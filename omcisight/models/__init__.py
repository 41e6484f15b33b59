"""Shared Pydantic models for OMCI log analysis."""

from omcisight.models.message import Direction, OmciMessage
from omcisight.models.analysis import (
    AnalysisResult,
    EntityStats,
    NodeType,
    ServiceLink,
    TopologyNode,
)
from omcisight.models.vlan import VlanTaggingRule

__all__ = [
    "Direction",
    "OmciMessage",
    "AnalysisResult",
    "EntityStats",
    "NodeType",
    "ServiceLink",
    "TopologyNode",
    "VlanTaggingRule",
]
