"""Tests for request/response correlation (omcisight.analysis.correlator)."""

from __future__ import annotations

from omcisight.analysis.correlator import Correlator
from omcisight.models.analysis import ServiceLink
from omcisight.models.message import Direction, OmciMessage
from omcisight.settings import ParserSettings

_defaults = ParserSettings()

_msg_id = 0


def make_message(
    *,
    direction: Direction = Direction.OLT_TO_ONU,
    message_type: str = "Create",
    tid: str = "0x0001",
    class_name: str = "GEM Port Network CTP",
    instance: str = "0x0001",
    is_error: bool = False,
    result_code: str | None = None,
) -> OmciMessage:
    """Build an OmciMessage with minimal boilerplate."""
    global _msg_id
    _msg_id += 1
    return OmciMessage(
        id=f"msg-{_msg_id}-0",
        index=_msg_id,
        timestamp="00:00:00",
        direction=direction,
        transaction_id=tid,
        message_type=message_type,
        me_class_name=class_name,
        me_instance=instance,
        is_error=is_error,
        result_code=result_code,
    )


def make_response(tid: str = "0x0001", *, ok: bool = True) -> OmciMessage:
    return make_message(
        direction=Direction.ONU_TO_OLT,
        tid=tid,
        is_error=not ok,
        result_code="Success" if ok else "Failed",
    )


def new_correlator() -> Correlator:
    return Correlator(_defaults.reference_keywords, _defaults.link_message_types)


# ---------------------------------------------------------------------------
# Promotion
# ---------------------------------------------------------------------------


def test_acknowledged_create_promotes_link():
    c = new_correlator()
    c.observe(make_message(), [("GEM Pointer", "0x0005")])
    assert c.pending_count == 1
    c.observe(make_response(), [])
    assert c.links == [
        ServiceLink(from_="GEM Port Network CTP (0x0001)", to="0x0005", label="GEM Pointer")
    ]
    assert c.pending_count == 0


def test_failed_response_does_not_promote():
    c = new_correlator()
    c.observe(make_message(), [("GEM Pointer", "0x0005")])
    c.observe(make_response(ok=False), [])
    assert c.links == []
    assert c.pending_count == 1


def test_response_with_other_transaction_does_not_promote():
    c = new_correlator()
    c.observe(make_message(tid="0x0001"), [("GEM Pointer", "0x0005")])
    c.observe(make_response(tid="0x0002"), [])
    assert c.links == []


def test_response_without_staged_links_is_noop():
    c = new_correlator()
    c.observe(make_response(), [])
    assert c.links == []
    assert c.pending_count == 0


def test_links_promoted_in_response_order():
    c = new_correlator()
    c.observe(make_message(tid="0x0001"), [("T-CONT pointer", "0x8001")])
    c.observe(make_message(tid="0x0002", instance="0x0002"), [("T-CONT pointer", "0x8002")])
    c.observe(make_response("0x0002"), [])
    c.observe(make_response("0x0001"), [])
    assert [link.to for link in c.links] == ["0x8002", "0x8001"]


def test_second_response_on_same_id_promotes_nothing():
    c = new_correlator()
    c.observe(make_message(), [("GEM Pointer", "0x0005")])
    c.observe(make_response(), [])
    c.observe(make_response(), [])
    assert len(c.links) == 1


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------


def test_only_create_and_set_stage_links():
    c = new_correlator()
    get = make_message(message_type="Get")
    assert c.candidate_links(get, [("GEM Pointer", "0x0005")]) == []
    set_table = make_message(message_type="Set Table")
    assert len(c.candidate_links(set_table, [("GEM Pointer", "0x0005")])) == 1


def test_message_type_match_is_case_sensitive():
    """MIB Reset contains "set" but is not a Set operation."""
    c = new_correlator()
    reset = make_message(message_type="MIB Reset")
    assert c.candidate_links(reset, [("GEM Pointer", "0x0005")]) == []


def test_reverse_direction_does_not_stage():
    c = new_correlator()
    msg = make_message(direction=Direction.ONU_TO_OLT)
    assert c.candidate_links(msg, [("GEM Pointer", "0x0005")]) == []


def test_value_must_be_hex_prefixed():
    c = new_correlator()
    assert c.candidate_links(make_message(), [("GEM Pointer", "5")]) == []
    assert len(c.candidate_links(make_message(), [("GEM Pointer", "0X0005")])) == 1


def test_key_must_match_reference_vocabulary():
    c = new_correlator()
    pairs = [
        ("Port ID", "0x0400"),
        ("Encryption state", "0x00"),
        ("ANI-G pointer", "0x8001"),
        ("Interwork TP pointer", "0x0002"),
        ("UNI counter", "0x01"),
    ]
    labels = [link.label for link in c.candidate_links(make_message(), pairs)]
    assert labels == ["ANI-G pointer", "Interwork TP pointer", "UNI counter"]


def test_duplicate_keys_stage_every_occurrence():
    c = new_correlator()
    pairs = [("GEM Pointer", "0x0005"), ("GEM Pointer", "0x0006")]
    c.observe(make_message(), pairs)
    c.observe(make_response(), [])
    assert [link.to for link in c.links] == ["0x0005", "0x0006"]


# ---------------------------------------------------------------------------
# Known limitations (preserved behavior)
# ---------------------------------------------------------------------------


def test_transaction_reuse_keeps_latest_request():
    """A newer request on the same id replaces the older one's staged links."""
    c = new_correlator()
    c.observe(make_message(instance="0x0001"), [("GEM Pointer", "0x0005")])
    c.observe(make_message(instance="0x0002"), [("GEM Pointer", "0x0006")])
    c.observe(make_response(), [])
    assert c.links == [
        ServiceLink(from_="GEM Port Network CTP (0x0002)", to="0x0006", label="GEM Pointer")
    ]


def test_unacknowledged_links_are_never_reported():
    c = new_correlator()
    c.observe(make_message(tid="0x0001"), [("GEM Pointer", "0x0005")])
    c.observe(make_message(tid="0x0002"), [("GEM Pointer", "0x0006")])
    assert c.links == []
    assert c.pending_count == 2


def test_link_serializes_from_key():
    link = ServiceLink(from_="ONT-G (0x0000)", to="0x0001", label="TP pointer")
    assert link.model_dump(by_alias=True) == {
        "from": "ONT-G (0x0000)",
        "to": "0x0001",
        "label": "TP pointer",
    }


def test_direction_is_forward():
    assert Direction.OLT_TO_ONU.is_forward
    assert not Direction.ONU_TO_OLT.is_forward


def test_summary_arrow_follows_direction():
    assert " → " in make_message().summary
    response = make_response(ok=False)
    assert " ← " in response.summary
    assert response.summary.endswith("[ERR: Failed]")
