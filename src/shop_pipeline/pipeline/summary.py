"""Pipeline health summary: where work orders sit and which look misfiled."""

from collections import Counter
from dataclasses import dataclass, field

from shop_pipeline.database.models import WorkOrder
from shop_pipeline.pipeline.stages import Stage
from shop_pipeline.utils.constants import CLOSED_WORK_ORDER_STATUSES


@dataclass
class PipelineSummary:
    total: int = 0
    by_stage: dict = field(default_factory=dict)
    by_status: dict = field(default_factory=dict)
    active: int = 0
    delivered: int = 0
    canceled: int = 0
    # Orders still in pending_quote although quotes are already linked
    suspect_ids: list = field(default_factory=list)


def summarize_pipeline(work_orders: list[WorkOrder]) -> PipelineSummary:
    """Count work orders by stage and status.

    An order is active unless it is canceled (by status or stage),
    delivered, or invoiced.
    """
    by_stage = Counter(wo.stage for wo in work_orders)
    by_status = Counter(wo.status for wo in work_orders)

    summary = PipelineSummary(
        total=len(work_orders),
        by_stage=dict(by_stage),
        by_status=dict(by_status),
    )
    for wo in work_orders:
        if wo.is_canceled:
            summary.canceled += 1
        elif wo.stage == Stage.DELIVERED:
            summary.delivered += 1
        elif wo.status not in CLOSED_WORK_ORDER_STATUSES:
            summary.active += 1
        if wo.stage == Stage.PENDING_QUOTE and wo.linked_quote_id_list:
            summary.suspect_ids.append(wo.id)
    return summary
