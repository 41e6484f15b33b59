"""OMCISight CLI entry point — OMCI text-export analyzer.

Usage:
    python -m omcisight.main -f capture.txt                # Message table + report
    python -m omcisight.main -f capture.txt -q             # Report only
    python -m omcisight.main -f capture.txt --only-errors  # Failed messages only
    python -m omcisight.main -f capture.txt --search gem   # Free-text filter
    python -m omcisight.main -f capture.txt --tree         # Class / instance tree
    python -m omcisight.main -f capture.txt --entity "ONT-G (0x0000)"  # Message detail

The input is a Wireshark "Export Packet Dissections → As Plain Text" file of
an OMCI capture.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from omcisight.analysis.entity_stats import EntityStatsAccumulator
from omcisight.analysis.explorer import (
    MessageGroup,
    build_topology,
    failed_messages,
    filter_messages,
    find_entity_message,
    group_mib_sequences,
    service_nodes,
    vlan_tagging_rules,
)
from omcisight.models.analysis import AnalysisResult, TopologyNode
from omcisight.models.message import Direction, OmciMessage
from omcisight.parsers.pipeline import parse
from omcisight.settings import load_settings

VERSION = "0.1.0"

logger = logging.getLogger("omcisight")

_DIRECTIONS: dict[str, Direction | None] = {
    "olt": Direction.OLT_TO_ONU,
    "onu": Direction.ONU_TO_OLT,
    "both": None,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="omcisight",
        description="OMCISight — OMCI protocol-analyzer export viewer",
    )

    parser.add_argument(
        "-f", "--file",
        metavar="LOG",
        required=True,
        help="Text export of an OMCI capture",
    )

    # Filters
    parser.add_argument(
        "--only-errors",
        action="store_true",
        help="Show only messages whose result is not a success",
    )
    parser.add_argument(
        "--direction",
        choices=sorted(_DIRECTIONS),
        default="both",
        help="Show only OLT→ONU (olt) or ONU→OLT (onu) messages (default: both)",
    )
    parser.add_argument(
        "--search",
        metavar="TEXT",
        default="",
        help="Case-insensitive match on entity class, instance, or message type",
    )

    # Inspection
    parser.add_argument(
        "--entity",
        metavar="ENTITY",
        default=None,
        help='Show the first message for a "Class (instance)" entity, e.g. "ONT-G (0x0000)"',
    )
    parser.add_argument(
        "--tree",
        action="store_true",
        help="Print the entity class / instance tree",
    )

    # Output
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress the per-message table, only show the report",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    # Settings
    parser.add_argument(
        "--settings",
        metavar="TOML",
        default=None,
        help="Path to settings_user.toml (default: auto-detect from project root)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )

    return parser


# ---------------------------------------------------------------------------
# Terminal output helpers
# ---------------------------------------------------------------------------

HEADER = f"{'#':<7} {'':<1} {'TID':<8} {'Message Type':<24} {'Managed Entity'}"
SEPARATOR = "─" * 72


def format_message_table(rows: list[OmciMessage | MessageGroup]) -> str:
    """Format filtered messages, one line each, with MIB bursts collapsed."""
    lines = ["", HEADER, SEPARATOR]
    for row in rows:
        if isinstance(row, MessageGroup):
            lines.append(
                f"#{row.first_index}-{row.last_index}  "
                f"[MIB sequence: {len(row.messages)} messages]"
            )
        else:
            lines.append(row.summary)
    if len(lines) == 3:
        lines.append("  (no matching messages)")
    return "\n".join(lines)


def format_message_detail(msg: OmciMessage) -> str:
    """Format one message with its attributes and decoded VLAN tables."""
    lines = ["", f"  Message #{msg.index}"]
    lines.append(f"    Direction:       {msg.direction.value}")
    lines.append(f"    Transaction:     {msg.transaction_id}")
    lines.append(f"    Message type:    {msg.message_type}")
    lines.append(f"    Entity:          {msg.me_class_name} [{msg.me_class}] {msg.me_instance}")
    if msg.result_code is not None:
        lines.append(f"    Result:          {msg.result_code}{'  (error)' if msg.is_error else ''}")

    if msg.attributes:
        lines.append("    Attributes:")
        for key, value in msg.attributes.items():
            lines.append(f"      {key}: {value}")

    for key, rule in vlan_tagging_rules(msg):
        lines.append(f"    {key} (decoded):")
        lines.extend(f"      {line}" for line in rule.description.splitlines())
    return "\n".join(lines)


def format_topology(node: TopologyNode, depth: int = 0) -> str:
    """Indented tree rendering of a topology node and its children."""
    lines = [f"  {'  ' * depth}{node.name}  [{node.type.value}]"]
    for child in node.children:
        lines.append(format_topology(child, depth + 1))
    return "\n".join(lines)


def format_final_report(result: AnalysisResult) -> str:
    """Format the summary report printed after the table."""
    acc = EntityStatsAccumulator()
    for msg in result.messages:
        acc.process_message(msg)
    summary = acc.get_summary()

    lines: list[str] = []
    lines.append("")
    lines.append("=" * 64)
    lines.append(f"  {'OMCISIGHT — ANALYSIS REPORT':^60}")
    lines.append("=" * 64)

    lines.append(f"\n  Messages:        {summary['total_messages']}")
    lines.append(f"  Entity classes:  {summary['class_count']}")
    lines.append(f"  Instances:       {summary['instance_count']}")
    lines.append(f"  Errors:          {summary['error_count']}")
    lines.append(f"  Service links:   {len(result.service_model)}")

    if result.stats:
        lines.append("\n  Managed Entities:")
        ranked = sorted(result.stats.values(), key=lambda s: s.count, reverse=True)
        for stat in ranked:
            lines.append(
                f"    {stat.class_name:<36} {stat.count:>6} msgs"
                f"  {len(stat.instances):>4} inst  {stat.errors:>4} err"
            )

    nodes = service_nodes(result)
    if nodes.connected:
        lines.append("\n  Service Model:")
        for link in nodes.connected:
            lines.append(f"    {link.from_} → {link.to}  via {link.label}")
    if nodes.isolated:
        lines.append(f"\n  Isolated entities ({len(nodes.isolated)}):")
        for entity in nodes.isolated[:20]:
            lines.append(f"    {entity}")

    vlan_lines: list[str] = []
    for msg in result.messages:
        for key, rule in vlan_tagging_rules(msg):
            vlan_lines.append(f"    #{msg.index:<6} {msg.entity}  {key}")
            vlan_lines.extend(f"      {line}" for line in rule.description.splitlines())
    if vlan_lines:
        lines.append("\n  VLAN tagging rules:")
        lines.extend(vlan_lines)

    failed = failed_messages(result)
    if failed:
        lines.append(f"\n  Failed messages ({len(failed)}):")
        for msg in failed[:20]:
            lines.append(f"    #{msg.index:<6} {msg.message_type:<24} {msg.entity}: {msg.result_code}")

    lines.append("\n" + "=" * 64)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Analysis run
# ---------------------------------------------------------------------------

def run_analysis(args: argparse.Namespace) -> int:
    """Read the export, parse it, print table and report. Returns exit status."""
    settings = load_settings(args.settings) if args.settings else load_settings()
    if settings.settings_path:
        logger.info("Loaded settings from %s", settings.settings_path)

    try:
        text = Path(args.file).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"\n❌ Cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    result = parse(text, settings.parser)

    print(f"\n🔍 OMCISight v{VERSION} — OMCI Export Analyzer")
    print(f"   Source: {args.file}")

    if not args.quiet:
        selected = filter_messages(
            result.messages,
            only_errors=args.only_errors,
            direction=_DIRECTIONS[args.direction],
            search=args.search,
        )
        filtered = args.only_errors or args.search or args.direction != "both"
        rows = selected if filtered else group_mib_sequences(selected)
        print(format_message_table(rows))

    if args.tree:
        print()
        print(format_topology(build_topology(result.stats)))

    if args.entity:
        msg = find_entity_message(result, args.entity)
        if msg is None:
            print(f"\n❌ No message addresses {args.entity}", file=sys.stderr)
            return 1
        print(format_message_detail(msg))

    print(format_final_report(result))
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    sys.exit(run_analysis(args))


if __name__ == "__main__":
    main()
