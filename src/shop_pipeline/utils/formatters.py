"""Formatting utilities for display values."""

from shop_pipeline.utils.constants import (
    SEQUENTIAL_ID_PAD_LIMIT,
    STAGE_LABELS,
    WORK_ORDER_STATUS_LABELS,
)


def format_sequential_id(prefix: str, sequence: int) -> str:
    """Format a record id like ``COT-0042``.

    Past 9999 the number is split on the thousands: ``COT-12.345``.
    """
    if sequence > SEQUENTIAL_ID_PAD_LIMIT:
        thousands, remainder = divmod(sequence, 1000)
        return f"{prefix}-{thousands}.{remainder:03d}"
    return f"{prefix}-{sequence:04d}"


def format_stage(value) -> str:
    """Human label for a stage (enum member or stored text)."""
    raw = getattr(value, "value", value)
    if raw is None or raw == "":
        return "—"
    return STAGE_LABELS.get(raw, str(raw))


def format_status(value) -> str:
    """Human label for a work order status."""
    raw = getattr(value, "value", value)
    return WORK_ORDER_STATUS_LABELS.get(raw, str(raw or "—"))


def format_stage_change(previous, new) -> str:
    """Format a stage transition as 'Old → New'."""
    return f"{format_stage(previous)} → {format_stage(new)}"
