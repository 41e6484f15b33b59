"""Extended VLAN Tagging Operation table entry (G.988 ME 171)."""

from pydantic import BaseModel

# Sentinel field values shared by filter and treatment words
VID_ANY = 4096
VID_UNTAGGED = 4095
PRIORITY_ANY = 15
PRIORITY_UNTAGGED = 8

ETHERTYPE_FILTERS: dict[int, str] = {
    0: "None",
    1: "0x0800",
}


class VlanTaggingRule(BaseModel):
    """One decoded 16-byte table row."""

    # Filter conditions
    filter_outer_priority: int
    filter_outer_vid: int
    filter_inner_priority: int
    filter_inner_vid: int
    filter_ethertype: int
    filter_ethertype_name: str

    # Treatment
    tags_to_remove: int  # 0-3
    treatment_outer_priority: int
    treatment_outer_vid: int
    treatment_outer_tpid: int
    treatment_inner_priority: int
    treatment_inner_vid: int

    raw_hex: str

    @staticmethod
    def vid_label(vid: int) -> str:
        if vid == VID_ANY:
            return "Any"
        if vid == VID_UNTAGGED:
            return "Untagged"
        return str(vid)

    @staticmethod
    def priority_label(priority: int) -> str:
        if priority == PRIORITY_ANY:
            return "Any"
        if priority == PRIORITY_UNTAGGED:
            return "Untagged"
        return str(priority)

    @staticmethod
    def treatment_label(value: int, copy_value: int) -> str:
        """Treatment fields reuse the "any" code to mean "copy from frame"."""
        return "Copy" if value == copy_value else str(value)

    @property
    def description(self) -> str:
        """Multi-line human-readable rendering of the rule."""
        lines = [
            "Filter:",
            f"  outer pri={self.priority_label(self.filter_outer_priority)}"
            f" vid={self.vid_label(self.filter_outer_vid)}",
            f"  inner pri={self.priority_label(self.filter_inner_priority)}"
            f" vid={self.vid_label(self.filter_inner_vid)}",
            f"  ethertype={self.filter_ethertype_name}",
            "Treatment:",
            f"  remove {self.tags_to_remove} tag(s)",
            f"  outer pri={self.treatment_label(self.treatment_outer_priority, PRIORITY_ANY)}"
            f" vid={self.treatment_label(self.treatment_outer_vid, VID_ANY)}"
            f" tpid={self.treatment_outer_tpid}",
            f"  inner pri={self.treatment_label(self.treatment_inner_priority, PRIORITY_ANY)}"
            f" vid={self.treatment_label(self.treatment_inner_vid, VID_ANY)}",
        ]
        return "\n".join(lines)
