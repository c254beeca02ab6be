"""Validation rules for import data."""

import json

from shop_pipeline.pipeline.stages import (
    ALL_QUOTE_STATUSES,
    ALL_STAGES,
    ALL_WORK_ORDER_STATUSES,
)


def validate_work_order_row(row: dict, row_num: int) -> list[str]:
    """Validate a single row of work order import data. Returns list of error strings."""
    errors = []

    wo_id = (row.get("id") or "").strip()
    if len(wo_id) > 30:
        errors.append(f"Row {row_num}: id exceeds 30 chars")

    stage = (row.get("stage") or "").strip()
    if stage and stage not in ALL_STAGES:
        errors.append(f"Row {row_num}: unknown stage '{stage}'")

    status = (row.get("status") or "").strip()
    if status and status not in ALL_WORK_ORDER_STATUSES:
        errors.append(f"Row {row_num}: unknown status '{status}'")

    diagnostic = (row.get("diagnostic_data") or "").strip()
    if diagnostic:
        try:
            if not isinstance(json.loads(diagnostic), dict):
                errors.append(
                    f"Row {row_num}: diagnostic_data must be a JSON object"
                )
        except json.JSONDecodeError:
            errors.append(f"Row {row_num}: diagnostic_data is not valid JSON")

    return errors


def validate_quote_row(row: dict, row_num: int) -> list[str]:
    """Validate a single row of quote import data. Returns list of error strings."""
    errors = []

    if not (row.get("work_order_id") or "").strip():
        errors.append(f"Row {row_num}: work_order_id is required")

    status = (row.get("status") or "").strip()
    if status and status not in ALL_QUOTE_STATUSES:
        errors.append(f"Row {row_num}: unknown status '{status}'")

    total = row.get("total", "")
    if total not in ("", None):
        try:
            t = float(total)
            if t < 0:
                errors.append(f"Row {row_num}: total cannot be negative")
        except (ValueError, TypeError):
            errors.append(f"Row {row_num}: total must be a number")

    return errors
