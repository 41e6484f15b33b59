"""OMCI message model — one decoded request or response from a text export."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Direction(str, Enum):
    """Which side of the OMCI channel sent the message."""

    OLT_TO_ONU = "OLT -> ONU"  # request originator → responder
    ONU_TO_OLT = "ONU -> OLT"

    @property
    def is_forward(self) -> bool:
        return self is Direction.OLT_TO_ONU


class OmciMessage(BaseModel):
    """A single OMCI message reconstructed from one export record."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str  # Synthetic id, unique within one parse run
    index: int  # "No." column value from the capture
    timestamp: str  # Wall clock at parse time (HH:MM:SS)
    capture_time: float | None = None  # Seconds since capture start, if present

    direction: Direction
    transaction_id: str  # 0x-prefixed hex
    message_type: str

    # Managed entity
    me_class: str = "0"
    me_class_name: str
    me_instance: str  # 0x-prefixed hex

    attributes: dict[str, str] = Field(default_factory=dict)
    raw: str = ""

    is_valid: bool = True
    result_code: str | None = None
    is_error: bool = False

    @property
    def entity(self) -> str:
        """Composite ``"Class (instance)"`` key used by service links."""
        return f"{self.me_class_name} ({self.me_instance})"

    @property
    def summary(self) -> str:
        """One-line summary for terminal output."""
        arrow = "→" if self.direction.is_forward else "←"
        result = ""
        if self.result_code is not None:
            result = f"  [{'ERR' if self.is_error else 'OK'}: {self.result_code}]"
        return (
            f"#{self.index:<6} {arrow} "
            f"{self.transaction_id:<8} "
            f"{self.message_type:<24} "
            f"{self.entity}"
            f"{result}"
        )
