"""Correlator — infer service links from acknowledged configuration requests.

An OLT → ONU Create/Set whose attributes point at another managed entity
stages candidate links under its transaction id. When a successful
ONU → OLT message with the same transaction id follows, the staged links
are promoted into the service model.

Known limitations, kept as-is:
- a later request reusing a transaction id replaces the earlier staged links
- staged links that never see a successful response are dropped silently
- out-of-order delivery and parallel requests on one id are not modeled

One instance per parse run; nothing is shared between runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from omcisight.models.analysis import ServiceLink
from omcisight.models.message import OmciMessage

logger = logging.getLogger(__name__)


class Correlator:
    """Pairs requests with responses by transaction id.

    Usage:
        correlator = Correlator(reference_keywords, link_message_types)
        correlator.observe(message, attribute_pairs)  # In capture order
        links = correlator.links                      # Promoted links
    """

    def __init__(
        self,
        reference_keywords: Iterable[str],
        link_message_types: Iterable[str],
    ) -> None:
        self._reference_keywords = [k.lower() for k in reference_keywords]
        self._link_message_types = list(link_message_types)
        self._pending: dict[str, list[ServiceLink]] = {}  # transaction id → staged links
        self._links: list[ServiceLink] = []

    def is_reference(self, key: str, value: str) -> bool:
        """True if an attribute looks like a pointer to another entity."""
        if not value.lower().startswith("0x"):
            return False
        lowered = key.lower()
        return any(k in lowered for k in self._reference_keywords)

    def candidate_links(
        self, message: OmciMessage, attribute_pairs: Iterable[tuple[str, str]]
    ) -> list[ServiceLink]:
        """Links a forward Create/Set message would establish if acknowledged."""
        if not message.direction.is_forward:
            return []
        if not any(t in message.message_type for t in self._link_message_types):
            return []
        return [
            ServiceLink(from_=message.entity, to=value, label=key)
            for key, value in attribute_pairs
            if self.is_reference(key, value)
        ]

    def observe(
        self, message: OmciMessage, attribute_pairs: Iterable[tuple[str, str]]
    ) -> None:
        """Stage or promote links for one message. Call in capture order."""
        candidates = self.candidate_links(message, attribute_pairs)
        if candidates:
            if message.transaction_id in self._pending:
                logger.debug(
                    "Correlator: transaction %s reused, replacing %d staged link(s)",
                    message.transaction_id,
                    len(self._pending[message.transaction_id]),
                )
            self._pending[message.transaction_id] = candidates
            return

        if message.direction.is_forward or message.is_error:
            return

        staged = self._pending.pop(message.transaction_id, None)
        if staged:
            self._links.extend(staged)
            logger.debug(
                "Correlator: promoted %d link(s) on transaction %s",
                len(staged),
                message.transaction_id,
            )

    @property
    def links(self) -> list[ServiceLink]:
        """Promoted links, in promotion order."""
        return list(self._links)

    @property
    def pending_count(self) -> int:
        """Number of transaction ids still waiting for a response."""
        return len(self._pending)
