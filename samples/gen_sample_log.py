#!/usr/bin/env python3
"""Generate a sample OMCI text export in Wireshark's plain-text dissection style.

Records:
  169      ARP broadcast (no OMCI; dropped by the segmenter)
  170-173  MIB Reset / MIB Upload on ONU Data
  174-175  Create GEM Port Network CTP 1 pointing at T-CONT 0x8001 (acknowledged)
  176-177  Set MAC bridge port config data 257 (rejected: Parameter error)
  178-179  Get ONT-G
"""

from pathlib import Path

OUTPUT = Path(__file__).resolve().parent / "sample_omci_export.txt"

COLUMN_BANNER = (
    "No.     Time           Source                Destination           "
    "Protocol Length Info"
)
OLT_MAC = "00:0a:5e:00:00:01"
ONU_MAC = "00:0a:5e:00:00:02"

# (message type, code, action bits) as printed in the header bitmask block
MESSAGE_TYPES = {
    "Create": (0x44, 4),
    "Set": (0x48, 8),
    "Get": (0x49, 9),
    "MIB Upload": (0x4D, 13),
    "MIB Reset": (0x4F, 15),
}


def make_record(
    index: int,
    time: float,
    outbound: bool,
    message_type: str,
    me_name: str,
    me_class: int,
    instance: int,
    tid: int,
    contents: list[str],
    detailed_type: bool = True,
) -> str:
    """Render one packet in the plain-text export layout."""
    marker = "OLT>" if outbound else "ONU<"
    src, dst = ("OLT", "ONU") if outbound else ("ONU", "OLT")
    eth_src, eth_dst = (OLT_MAC, ONU_MAC) if outbound else (ONU_MAC, OLT_MAC)
    code, action = MESSAGE_TYPES[message_type]
    if not outbound:
        code |= 0x20
    info = f"{marker} {message_type} - {me_name}"

    lines = [
        COLUMN_BANNER,
        f"{index:>7} {time:<14.6f} {src:<21} {dst:<21} OMCI     62     {info}",
        "",
        f"Frame {index}: 62 bytes on wire (496 bits), 62 bytes captured (496 bits)",
        f"Ethernet II, Src: {eth_src} ({eth_src}), Dst: {eth_dst} ({eth_dst})",
        f"OMCI Protocol, {info}",
        f"    Transaction Correlation ID: {tid}",
    ]
    if detailed_type:
        lines.append(f"    Message Type = {message_type} (0x{code:02x})")
    lines += [
        "        0... .... = Destination Bit: 0x0",
        f"        .{int(outbound)}.. .... = Acknowledge Request: 0x{int(outbound)}",
        f"        ..{int(not outbound)}. .... = Acknowledgement: 0x{int(not outbound)}",
        f"        ...{action >> 4:01b} {action & 0xF:04b} = Message Type: {message_type} ({action})",
        "    Device Identifier: Baseline Message (0x0a)",
        "    Message Identifier",
        f"        Managed Entity Class: {me_name} ({me_class})",
        f"        Managed Entity Instance: {instance}",
        "    Message Contents",
    ]
    lines += [f"        {c}" for c in contents]
    lines += [
        "    OMCI Trailer",
        "        CPCS-UU and CPI: 0x0000",
        "        Trailer Length: 40",
        "",
    ]
    return "\n".join(lines)


def make_arp(index: int, time: float) -> str:
    return "\n".join([
        COLUMN_BANNER,
        f"{index:>7} {time:<14.6f} {OLT_MAC:<21} {'Broadcast':<21} ARP      60     "
        "Who has 192.168.1.1? Tell 192.168.1.10",
        "",
        f"Frame {index}: 60 bytes on wire (480 bits), 60 bytes captured (480 bits)",
        f"Ethernet II, Src: {OLT_MAC} ({OLT_MAC}), Dst: Broadcast (ff:ff:ff:ff:ff:ff)",
        "Address Resolution Protocol (request)",
        "",
    ])


def main() -> None:
    ok = "Result: Command processed successfully (0)"
    records = [
        make_arp(169, 9.600001),
        make_record(170, 9.612345, True, "MIB Reset", "ONU Data", 2, 0, 1, []),
        make_record(171, 9.620011, False, "MIB Reset", "ONU Data", 2, 0, 1, [ok],
                    detailed_type=False),
        make_record(172, 9.633120, True, "MIB Upload", "ONU Data", 2, 0, 2, []),
        make_record(173, 9.641877, False, "MIB Upload", "ONU Data", 2, 0, 2,
                    ["Number of subsequent commands: 0x0021"], detailed_type=False),
        make_record(174, 9.664179, True, "Create", "GEM Port Network CTP", 268, 1, 3, [
            "Port ID: 1024",
            "T-CONT pointer: 0x8001",
            "Traffic management pointer for upstream: 0x8001",
        ]),
        make_record(175, 9.671002, False, "Create", "GEM Port Network CTP", 268, 1, 3, [ok],
                    detailed_type=False),
        make_record(176, 9.690550, True, "Set", "MAC bridge port config data", 47, 257, 4, [
            "Attribute Mask: 0x0800",
            "TP pointer: 0x0101",
        ]),
        make_record(177, 9.698312, False, "Set", "MAC bridge port config data", 47, 257, 4,
                    ["Result: Parameter error (3)"], detailed_type=False),
        make_record(178, 9.710004, True, "Get", "ONT-G", 256, 0, 5, ["Attribute Mask: 0xc000"]),
        make_record(179, 9.718840, False, "Get", "ONT-G", 256, 0, 5, [
            ok,
            "Attribute Mask: 0xc000",
            "Vendor ID: ZTEG",
            "Version: ZXHN F660",
        ], detailed_type=False),
    ]
    OUTPUT.write_text("\n".join(records), encoding="utf-8")
    print(f"Wrote {len(records)} records to {OUTPUT}")


if __name__ == "__main__":
    main()
