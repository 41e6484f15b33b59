"""Field extractor — recover typed OMCI message fields from one text chunk.

Each field has its own rule: a pure function that returns the value or
``None`` when the chunk does not carry it. ``extract_message`` composes the
rules with their fallback values, so it never fails on a chunk that passed
segmentation.

Rules, in order:
1. index            — leading "No." integer of the packet-list summary line
2. direction/brief  — "OMCI Protocol, OLT> Get - ONT-G" banner line
3. message type     — "Message Type = Get (0x49)"
4. entity class     — "Managed Entity Class: ONT-G (256)"
5. entity instance  — "Managed Entity Instance: 0"
6. transaction id   — "Transaction Correlation ID: 12"
7. result           — "Result: Command processed successfully (0)"
8. attributes       — remaining "Key: value" lines up to the trailer
"""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Iterable

from omcisight.models.message import Direction, OmciMessage
from omcisight.settings import ParserSettings

logger = logging.getLogger(__name__)

DEFAULT_HEX_ID = "0x0000"
DEFAULT_MESSAGE_TYPE = "Unknown"
DEFAULT_CLASS_NAME = "Unknown Entity"
DEFAULT_CLASS_ID = "0"

_NUMBER = r"(0x[0-9a-f]+|[0-9]+)"

SUMMARY_LINE_RE = re.compile(r"^([0-9]+)\s+([0-9]+\.[0-9]+)")

FORWARD_MARKER_RE = re.compile(r"OLT\s?>")
REVERSE_MARKER_RE = re.compile(r"ONU\s?<")
BANNER_BRIEF_RE = re.compile(r",\s*(?:OLT\s?>|ONU\s?<)\s*([^-]+?)\s*-\s*(.+)$", re.IGNORECASE)

MESSAGE_TYPE_RE = re.compile(r"Message Type[ \t]*=[ \t]*([^(\n\r]+)", re.IGNORECASE)
ENTITY_CLASS_RE = re.compile(
    r"Managed Entity Class:[ \t]*([^(\n\r]+?)[ \t]*\(" + _NUMBER + r"\)", re.IGNORECASE
)
ENTITY_INSTANCE_RES = (
    re.compile(r"Managed Entity Instance:[ \t]*" + _NUMBER, re.IGNORECASE),
    re.compile(r"ME Instance:[ \t]*" + _NUMBER, re.IGNORECASE),
    re.compile(r"Entity Instance:[ \t]*" + _NUMBER, re.IGNORECASE),
    re.compile(r"Instance[ \t]*=[ \t]*" + _NUMBER, re.IGNORECASE),
)
TRANSACTION_RES = (
    re.compile(r"Transaction Correlation ID:[ \t]*" + _NUMBER, re.IGNORECASE),
    re.compile(r"Transaction ID:[ \t]*" + _NUMBER, re.IGNORECASE),
)
RESULT_WITH_CODE_RE = re.compile(r"Result:[ \t]*([^(\n\r]+?)[ \t]*\(" + _NUMBER + r"\)", re.IGNORECASE)
RESULT_BARE_RE = re.compile(r"Result:[ \t]*([^\n\r]+)", re.IGNORECASE)

# Lines that look like "Key: value" but are not message contents
BITMASK_LINE_RE = re.compile(r"^[01.\s]+=")
HW_ADDRESS_RE = re.compile(r"(?:[0-9a-f]{2}[:_]){5}[0-9a-f]{2}|^[^:]*ethernet", re.IGNORECASE)
# Wireshark "Frame" tree details; OMCI attribute names may still contain "frame"
FRAME_DETAIL_RE = re.compile(
    r"^\[?(?:frame\b|arrival time|epoch (?:time|arrival time)|time (?:shift|delta|since)"
    r"|capture length|protocols in frame|coloring rule|encapsulation|interface id)",
    re.IGNORECASE,
)
HEADER_LABELS = (
    "transaction correlation",
    "message type",
    "device identifier",
    "message identifier",
    "managed entity",
    "attribute mask",
)
FRAME_MARKER_RE = re.compile(r"^(?:frame [0-9]+|no\.\s+time)", re.IGNORECASE)


def _lines(chunk: str) -> list[str]:
    """Trimmed, non-empty lines of a chunk."""
    return [line.strip() for line in chunk.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_hex(token: str) -> str | None:
    """Normalize an id token to ``0x``-prefixed lowercase hex.

    Decimal input is zero-padded to four digits (``"171"`` → ``"0x00ab"``).
    Input that is already ``0x``-prefixed is lowercased but not re-padded
    (``"0xAB"`` → ``"0xab"``). Returns ``None`` for anything unparseable.
    """
    token = token.strip()
    try:
        if token[:2].lower() == "0x":
            int(token, 16)
            return token.lower()
        return f"0x{int(token, 10):04x}"
    except ValueError:
        logger.debug("Unparseable id token %r", token)
        return None


def is_success_result(text: str, vocabulary: Iterable[str]) -> bool:
    """True if any success phrase occurs in ``text`` as a whole word.

    Matching is case-insensitive, so ``"0x00 (Command processed
    successfully)"`` and ``"Success, no errors"`` pass while
    ``"Unsuccessful"`` and ``"0x0003"`` do not.
    """
    for phrase in vocabulary:
        phrase = phrase.strip()
        if phrase and re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text, re.IGNORECASE):
            return True
    return False


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def find_index(lines: list[str]) -> int | None:
    """Record number from the first "<int> <float>" summary line."""
    for line in lines:
        match = SUMMARY_LINE_RE.match(line)
        if match:
            return int(match.group(1))
    return None


def find_capture_time(lines: list[str]) -> float | None:
    """Relative capture time from the same summary line as the index."""
    for line in lines:
        match = SUMMARY_LINE_RE.match(line)
        if match:
            return float(match.group(2))
    return None


def find_banner_line(lines: list[str], keyword: str = "OMCI") -> str | None:
    """The "<keyword> Protocol, ..." dissector banner line."""
    needle = f"{keyword} protocol".lower()
    for line in lines:
        if needle in line.lower():
            return line
    return None


def find_direction(banner: str) -> Direction | None:
    if REVERSE_MARKER_RE.search(banner):
        return Direction.ONU_TO_OLT
    if FORWARD_MARKER_RE.search(banner):
        return Direction.OLT_TO_ONU
    return None


def find_brief(banner: str) -> tuple[str, str] | None:
    """Provisional (message type, entity name) from the banner line."""
    match = BANNER_BRIEF_RE.search(banner)
    if not match:
        return None
    return match.group(1).strip(), match.group(2).strip()


def find_message_type(chunk: str) -> str | None:
    match = MESSAGE_TYPE_RE.search(chunk)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def find_entity_class(chunk: str) -> tuple[str, str] | None:
    """(class name, class id) from the Managed Entity Class line."""
    match = ENTITY_CLASS_RE.search(chunk)
    if not match or not match.group(1).strip():
        return None
    return match.group(1).strip(), match.group(2).strip()


def _find_hex_id(chunk: str, patterns: tuple[re.Pattern[str], ...]) -> str | None:
    for pattern in patterns:
        match = pattern.search(chunk)
        if match:
            return normalize_hex(match.group(1))
    return None


def find_entity_instance(chunk: str) -> str | None:
    return _find_hex_id(chunk, ENTITY_INSTANCE_RES)


def find_transaction_id(chunk: str) -> str | None:
    return _find_hex_id(chunk, TRANSACTION_RES)


def find_result(chunk: str) -> str | None:
    """Result description, without its trailing "(code)" if present."""
    match = RESULT_WITH_CODE_RE.search(chunk) or RESULT_BARE_RE.search(chunk)
    if not match:
        return None
    return match.group(1).strip()


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

def _is_structural(line: str, banner_needle: str) -> bool:
    """True for lines that carry framing or header data, not attributes."""
    lowered = line.lower()
    if BITMASK_LINE_RE.match(line):
        return True
    if SUMMARY_LINE_RE.match(line):
        return True
    if HW_ADDRESS_RE.search(line):
        return True
    if banner_needle in lowered:
        return True
    if FRAME_MARKER_RE.match(line) or FRAME_DETAIL_RE.match(line):
        return True
    return any(label in lowered for label in HEADER_LABELS)


def extract_attribute_pairs(chunk: str, keyword: str = "OMCI") -> list[tuple[str, str]]:
    """Ordered (key, value) pairs from the message body, duplicates kept.

    Stops at the first line mentioning the trailer.
    """
    banner_needle = f"{keyword} protocol".lower()
    pairs: list[tuple[str, str]] = []
    for line in _lines(chunk):
        if "trailer" in line.lower():
            break
        if ":" not in line or _is_structural(line, banner_needle):
            continue

        key, _, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if not key or not value:
            continue
        if key[0] in "0.":
            continue  # Bitmask residue, e.g. "0... .... Flag: x"
        pairs.append((key, value))
    return pairs


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def extract_message(
    chunk: str,
    position: int,
    settings: ParserSettings | None = None,
    attribute_pairs: list[tuple[str, str]] | None = None,
) -> OmciMessage:
    """Build an ``OmciMessage`` from one segmented chunk.

    Every field falls back to a default when its rule finds nothing.

    Args:
        chunk: Raw record text, as produced by the segmenter.
        position: Zero-based position of the chunk in the export.
        settings: Parser vocabulary. ``None`` uses the built-in defaults.
        attribute_pairs: Pre-computed output of ``extract_attribute_pairs``;
            computed here when omitted.

    Returns:
        The populated message.
    """
    if settings is None:
        settings = ParserSettings()
    keyword = settings.protocol_keyword
    lines = _lines(chunk)

    index = find_index(lines)
    if index is None:
        index = position + 1

    direction = Direction.OLT_TO_ONU
    brief_type = brief_entity = None
    banner = find_banner_line(lines, keyword)
    if banner is not None:
        direction = find_direction(banner) or Direction.OLT_TO_ONU
        brief = find_brief(banner)
        if brief:
            brief_type, brief_entity = brief

    message_type = find_message_type(chunk) or brief_type or DEFAULT_MESSAGE_TYPE

    entity_class = find_entity_class(chunk)
    if entity_class:
        me_class_name, me_class = entity_class
    else:
        me_class_name, me_class = brief_entity or DEFAULT_CLASS_NAME, DEFAULT_CLASS_ID

    result_code = find_result(chunk)
    is_error = result_code is not None and not is_success_result(
        result_code, settings.success_results
    )

    if attribute_pairs is None:
        attribute_pairs = extract_attribute_pairs(chunk, keyword)

    return OmciMessage(
        id=f"msg-{index}-{position}",
        index=index,
        timestamp=datetime.datetime.now().strftime("%H:%M:%S"),
        capture_time=find_capture_time(lines),
        direction=direction,
        transaction_id=find_transaction_id(chunk) or DEFAULT_HEX_ID,
        message_type=message_type,
        me_class=me_class,
        me_class_name=me_class_name,
        me_instance=find_entity_instance(chunk) or DEFAULT_HEX_ID,
        attributes=dict(attribute_pairs),
        raw=chunk,
        result_code=result_code,
        is_error=is_error,
    )
