"""Stage reconciliation: brings stored work order stages in line with
what the resolver says they should be.

All functions take the data store as an argument; nothing here holds a
connection or client of its own. ``Repository`` satisfies
``WorkOrderStore``, and tests can hand in anything with the same methods.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from shop_pipeline.config import Config
from shop_pipeline.database.models import (
    Notification,
    Quote,
    StageHistoryEntry,
    WorkOrder,
)
from shop_pipeline.pipeline.resolver import (
    NOTE_UNRESOLVED_REFERENCE,
    ResolutionNote,
    resolve_stage,
)
from shop_pipeline.pipeline.stages import Stage
from shop_pipeline.utils.constants import NOTIFICATION_SOURCE_RECONCILE
from shop_pipeline.utils.formatters import format_stage_change

logger = logging.getLogger(__name__)


class WorkOrderStore(Protocol):
    """The data access the reconciliation workflow needs."""

    def get_all_work_orders(self) -> list[WorkOrder]: ...

    def get_work_order_by_id(self, work_order_id: str) -> Optional[WorkOrder]: ...

    def get_quotes_by_ids(self, quote_ids) -> dict[str, Quote]: ...

    def update_work_order_stage(self, work_order_id: str, stage) -> None: ...

    def set_linked_quote_ids(self, work_order_id: str,
                             quote_ids: list[str]) -> None: ...

    def add_stage_history(self, entry: StageHistoryEntry) -> int: ...

    def create_notification(self, notification: Notification) -> int: ...


@dataclass
class StageChange:
    work_order_id: str
    previous_stage: str   # as stored, may not be a valid stage
    new_stage: Stage
    reason: str
    notes: tuple[ResolutionNote, ...] = ()


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation run.

    ``updated`` counts changes written, or changes that would be written
    on a dry run.
    """
    checked: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    dry_run: bool = False
    changes: list[StageChange] = field(default_factory=list)
    notes: list[ResolutionNote] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_unresolved_references(self) -> bool:
        return any(n.kind == NOTE_UNRESOLVED_REFERENCE for n in self.notes)

    @property
    def changed_ids(self) -> list[str]:
        return [c.work_order_id for c in self.changes]


def reconcile_work_orders(
    store: WorkOrderStore,
    dry_run: bool = False,
    skip_delivered: Optional[bool] = None,
    notify: Optional[bool] = None,
) -> ReconciliationReport:
    """Resolve every work order and persist the ones whose stage drifted.

    Linked quotes for the whole batch are fetched in one call. A failure
    writing one work order is logged and recorded in the report; the run
    carries on with the rest.
    """
    if skip_delivered is None:
        skip_delivered = Config.RECONCILE_SKIP_DELIVERED
    if notify is None:
        notify = Config.RECONCILE_NOTIFY

    report = ReconciliationReport(dry_run=dry_run)
    work_orders = store.get_all_work_orders()
    quote_ids = [qid for wo in work_orders for qid in wo.linked_quote_id_list]
    quotes_by_id = store.get_quotes_by_ids(quote_ids)

    for work_order in work_orders:
        if skip_delivered and work_order.stage == Stage.DELIVERED:
            report.skipped += 1
            continue
        report.checked += 1
        try:
            change, notes = _reconcile_one(
                store, work_order, quotes_by_id, dry_run, notify,
            )
        except Exception as e:
            logger.error(f"Failed to reconcile work order {work_order.id}: {e}")
            report.errors.append(f"{work_order.id}: {e}")
            continue
        report.notes.extend(notes)
        if change is None:
            report.unchanged += 1
        else:
            report.changes.append(change)
            report.updated += 1

    logger.info(
        f"Reconciled {report.checked} work orders: {report.updated} "
        f"{'to update' if dry_run else 'updated'}, {report.unchanged} "
        f"unchanged, {report.skipped} skipped, {len(report.errors)} errors"
    )
    return report


def fix_work_order_stage(
    store: WorkOrderStore,
    work_order_id: str,
    dry_run: bool = False,
    notify: Optional[bool] = None,
) -> Optional[StageChange]:
    """Reconcile a single work order, delivered or not.

    Returns the change made, or None if the stage was already correct.
    """
    work_order = store.get_work_order_by_id(work_order_id)
    if work_order is None:
        raise ValueError(f"Work order {work_order_id} not found")
    if notify is None:
        notify = Config.RECONCILE_NOTIFY
    quotes_by_id = store.get_quotes_by_ids(work_order.linked_quote_id_list)
    change, _ = _reconcile_one(store, work_order, quotes_by_id, dry_run, notify)
    return change


def apply_quote_status_change(
    store: WorkOrderStore,
    quote: Quote,
    notify: Optional[bool] = None,
) -> Optional[StageChange]:
    """Follow up a saved quote on its work order.

    Links the quote to the work order if it is not linked yet, then
    reconciles that work order using the quote as given.
    """
    if not quote.id:
        raise ValueError("Quote has no id; save it before applying it")
    if not quote.work_order_id:
        raise ValueError(f"Quote {quote.id} is not attached to a work order")
    work_order = store.get_work_order_by_id(quote.work_order_id)
    if work_order is None:
        raise ValueError(f"Work order {quote.work_order_id} not found")
    if notify is None:
        notify = Config.RECONCILE_NOTIFY

    linked = work_order.linked_quote_id_list
    if quote.id not in linked:
        linked.append(quote.id)
        store.set_linked_quote_ids(work_order.id, linked)
        work_order.linked_quote_ids = json.dumps(linked)

    if Config.RECONCILE_SKIP_DELIVERED and work_order.stage == Stage.DELIVERED:
        return None

    quotes_by_id = store.get_quotes_by_ids(linked)
    quotes_by_id[quote.id] = quote
    change, _ = _reconcile_one(store, work_order, quotes_by_id, False, notify)
    return change


def _reconcile_one(
    store: WorkOrderStore,
    work_order: WorkOrder,
    quotes_by_id: dict[str, Quote],
    dry_run: bool,
    notify: bool,
) -> tuple[Optional[StageChange], tuple[ResolutionNote, ...]]:
    resolution = resolve_stage(work_order, quotes_by_id)
    if resolution.stage == work_order.stage:
        return None, resolution.notes

    change = StageChange(
        work_order_id=work_order.id,
        previous_stage=work_order.stage,
        new_stage=resolution.stage,
        reason=resolution.reason,
        notes=resolution.notes,
    )
    if dry_run:
        return change, resolution.notes

    store.update_work_order_stage(work_order.id, resolution.stage)
    store.add_stage_history(StageHistoryEntry(
        work_order_id=work_order.id,
        stage=resolution.stage.value,
        previous_stage=work_order.stage,
        user_label=Config.SYSTEM_USER_LABEL,
        notes=resolution.reason,
    ))
    if notify:
        store.create_notification(_build_notification(change))
    logger.info(
        f"Work order {work_order.id}: "
        f"{format_stage_change(change.previous_stage, change.new_stage)} "
        f"({change.reason})"
    )
    return change, resolution.notes


def _build_notification(change: StageChange) -> Notification:
    if change.new_stage is Stage.IN_REPAIR:
        title, severity = "Repair started", "info"
    elif change.new_stage is Stage.ATTENTION_REQUIRED:
        title, severity = "Attention required", "warning"
    else:
        title, severity = "Stage updated", "info"
    return Notification(
        work_order_id=change.work_order_id,
        title=title,
        message=(
            f"Work order {change.work_order_id}: "
            f"{format_stage_change(change.previous_stage, change.new_stage)}"
            f" - {change.reason}"
        ),
        severity=severity,
        source=NOTIFICATION_SOURCE_RECONCILE,
    )