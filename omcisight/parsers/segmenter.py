"""Log segmenter — split a protocol-analyzer text export into per-record chunks.

A Wireshark "File > Export Packet Dissections > As Plain Text" dump repeats the
packet-list column banner (``No.  Time  Source ...``) in front of every record.
Exports made without the summary line carry only the ``Frame N:`` detail line,
which is used as the delimiter instead.

Splitting is a lookahead split: the delimiter line stays at the head of the
chunk it introduces, since it carries the record number.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

COLUMN_BANNER_RE = re.compile(r"(?=No\.\s+Time\s+Source)", re.IGNORECASE)
FRAME_LINE_RE = re.compile(r"(?=^[ \t]*Frame [0-9]+:)", re.MULTILINE)

DEFAULT_KEYWORD = "OMCI"


def split_records(text: str) -> list[str]:
    """Split raw export text at every record delimiter.

    Returns all chunks, including leading noise before the first delimiter.
    An input without delimiters comes back as a single chunk.
    """
    if COLUMN_BANNER_RE.search(text):
        chunks = COLUMN_BANNER_RE.split(text)
    else:
        chunks = FRAME_LINE_RE.split(text)
    return [c for c in chunks if c]


def segment(text: str, keyword: str = DEFAULT_KEYWORD) -> list[str]:
    """Split ``text`` into chunks and keep those that mention ``keyword``.

    Chunks without the protocol keyword are link-layer-only frames, banners,
    or blank regions and are dropped silently.
    """
    needle = keyword.lower()
    kept: list[str] = []
    dropped = 0
    for chunk in split_records(text):
        if chunk.strip() and needle in chunk.lower():
            kept.append(chunk)
        else:
            dropped += 1

    if dropped:
        logger.debug("Segmenter: dropped %d chunk(s) without %r", dropped, keyword)
    return kept
