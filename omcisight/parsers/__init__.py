"""OMCI text-export parser modules."""

from omcisight.parsers.segmenter import segment, split_records
from omcisight.parsers.fields import extract_attribute_pairs, extract_message, normalize_hex
from omcisight.parsers.vlan_table import decode_vlan_tagging_entry
from omcisight.parsers.pipeline import parse

__all__ = [
    "segment",
    "split_records",
    "extract_attribute_pairs",
    "extract_message",
    "normalize_hex",
    "decode_vlan_tagging_entry",
    "parse",
]
