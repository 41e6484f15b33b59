"""Full OMCI text-export parse pipeline.

Orchestrates segment → extract → correlate → sort → aggregate for one
export and returns a fresh ``AnalysisResult``. All working state (the
correlator's pending map, the stats accumulator) is local to the call, so
``parse`` can run repeatedly or in parallel on independent inputs.

Irregular input never raises: chunks without the protocol keyword are
dropped, and missing fields fall back to their defaults.
"""

from __future__ import annotations

import logging

from omcisight.analysis.correlator import Correlator
from omcisight.analysis.entity_stats import aggregate
from omcisight.models.analysis import AnalysisResult, NodeType, TopologyNode
from omcisight.parsers.fields import extract_attribute_pairs, extract_message
from omcisight.parsers.segmenter import segment
from omcisight.settings import ParserSettings

logger = logging.getLogger(__name__)


def parse(text: str, settings: ParserSettings | None = None) -> AnalysisResult:
    """Parse a protocol-analyzer text export into an ``AnalysisResult``.

    Args:
        text: Full contents of the export.
        settings: Parser vocabulary. ``None`` uses the built-in defaults;
            no settings file is read here.

    Returns:
        Messages sorted by record index (stable), per-class stats, the
        inferred service model, an empty anomaly list, and a placeholder
        topology root.
    """
    if settings is None:
        settings = ParserSettings()

    correlator = Correlator(settings.reference_keywords, settings.link_message_types)
    messages = []

    for position, chunk in enumerate(segment(text, settings.protocol_keyword)):
        pairs = extract_attribute_pairs(chunk, settings.protocol_keyword)
        message = extract_message(chunk, position, settings, attribute_pairs=pairs)
        correlator.observe(message, pairs)
        messages.append(message)

    messages.sort(key=lambda m: m.index)

    if correlator.pending_count:
        logger.debug(
            "%d transaction(s) with staged links never acknowledged",
            correlator.pending_count,
        )
    logger.info(
        "Parsed %d OMCI message(s), %d service link(s)",
        len(messages),
        len(correlator.links),
    )

    return AnalysisResult(
        messages=messages,
        stats=aggregate(messages),
        service_model=correlator.links,
        anomalies=[],
        topology=TopologyNode(name=settings.topology_root_name, type=NodeType.OLT),
    )
