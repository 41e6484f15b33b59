"""Extended VLAN Tagging Operation table decoder (G.988 ME 171).

Set messages for ME 171 carry the "Received frame VLAN tagging operation
table" attribute as a 16-byte hex blob. Layout of the bytes used here:

    0-1   filter outer priority (4 bits) | filter outer VID (12 bits)
    2-3   filter inner priority (4 bits) | filter inner VID (12 bits)
    4     filter ethertype (low nibble)
    5     tags to remove (top two bits)
    6-7   treatment outer priority | treatment outer VID, TPID in byte 6 bits 1-2
    8-9   treatment inner priority | treatment inner VID
    10-15 not decoded
"""

from __future__ import annotations

import logging
import re

from omcisight.models.vlan import ETHERTYPE_FILTERS, VlanTaggingRule

logger = logging.getLogger(__name__)

ENTRY_LENGTH = 16

_HEX_NOISE_RE = re.compile(r"^0x|[\s:]", re.IGNORECASE)


def _priority_vid(high: int, low: int) -> tuple[int, int]:
    """Split a 16-bit word into (4-bit priority, 12-bit VID)."""
    return (high >> 4) & 0x0F, ((high & 0x0F) << 8) | low


def decode_vlan_tagging_entry(hex_value: str) -> VlanTaggingRule | None:
    """Decode one table entry from its hex rendering.

    Accepts ``0x``-prefixed, spaced, or colon-separated hex. Returns ``None``
    if the value is not hex or is shorter than one 16-byte entry; extra
    trailing bytes are ignored.
    """
    cleaned = _HEX_NOISE_RE.sub("", hex_value.strip())
    try:
        data = bytes.fromhex(cleaned)
    except ValueError:
        logger.debug("VLAN table: not a hex value: %r", hex_value)
        return None

    if len(data) < ENTRY_LENGTH:
        logger.debug("VLAN table: entry too short (%d bytes)", len(data))
        return None

    f_outer_pri, f_outer_vid = _priority_vid(data[0], data[1])
    f_inner_pri, f_inner_vid = _priority_vid(data[2], data[3])
    t_outer_pri, t_outer_vid = _priority_vid(data[6], data[7])
    t_inner_pri, t_inner_vid = _priority_vid(data[8], data[9])
    ethertype = data[4] & 0x0F

    return VlanTaggingRule(
        filter_outer_priority=f_outer_pri,
        filter_outer_vid=f_outer_vid,
        filter_inner_priority=f_inner_pri,
        filter_inner_vid=f_inner_vid,
        filter_ethertype=ethertype,
        filter_ethertype_name=ETHERTYPE_FILTERS.get(ethertype, "Other"),
        tags_to_remove=(data[5] >> 6) & 0x03,
        treatment_outer_priority=t_outer_pri,
        treatment_outer_vid=t_outer_vid,
        treatment_outer_tpid=(data[6] >> 1) & 0x03,
        treatment_inner_priority=t_inner_pri,
        treatment_inner_vid=t_inner_vid,
        raw_hex=data[:ENTRY_LENGTH].hex(),
    )
