"""Pipeline stages, work order statuses and quote statuses.

Stages form a fixed, totally ordered sequence. ``Stage.CANCELED`` is a
terminal stage that sits outside the ordering.
"""

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    RECEPTION = "reception"
    DIAGNOSTIC = "diagnostic"
    PENDING_QUOTE = "pending_quote"
    AWAITING_APPROVAL = "awaiting_approval"
    ATTENTION_REQUIRED = "attention_required"
    IN_REPAIR = "in_repair"
    QUALITY_CONTROL = "quality_control"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"
    CANCELED = "canceled"


class WorkOrderStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    AWAITING_PARTS = "awaiting_parts"
    READY = "ready"
    INVOICED = "invoiced"
    CANCELED = "canceled"


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"


STAGE_SEQUENCE: tuple[Stage, ...] = (
    Stage.RECEPTION,
    Stage.DIAGNOSTIC,
    Stage.PENDING_QUOTE,
    Stage.AWAITING_APPROVAL,
    Stage.ATTENTION_REQUIRED,
    Stage.IN_REPAIR,
    Stage.QUALITY_CONTROL,
    Stage.READY_FOR_DELIVERY,
    Stage.DELIVERED,
)

_STAGE_INDEX: dict[Stage, int] = {
    stage: i for i, stage in enumerate(STAGE_SEQUENCE)
}

ALL_STAGES = [s.value for s in Stage]
ALL_WORK_ORDER_STATUSES = [s.value for s in WorkOrderStatus]
ALL_QUOTE_STATUSES = [s.value for s in QuoteStatus]


def parse_stage(value) -> Optional[Stage]:
    """Return the Stage for a stored value, or None if it is not one."""
    if isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except (ValueError, TypeError):
        return None


def parse_quote_status(value) -> Optional[QuoteStatus]:
    if isinstance(value, QuoteStatus):
        return value
    try:
        return QuoteStatus(value)
    except (ValueError, TypeError):
        return None


def stage_index(value) -> int:
    """Position of a stage in STAGE_SEQUENCE.

    Canceled, unknown and missing values all rank at -1, before the
    first stage.
    """
    stage = parse_stage(value)
    if stage is None:
        return -1
    return _STAGE_INDEX.get(stage, -1)
