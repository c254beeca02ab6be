"""Stage resolver: works out which pipeline stage a work order belongs in.

The decision only looks at the work order's own data and the statuses of
its linked quotes; the stored stage matters solely for cancellation and
for not pulling an order back out of active repair. Rules are checked in
a fixed order and the first match wins:

1. canceled status or stage           -> canceled
2. no diagnostic data                 -> reception
3. no linked quotes                   -> pending_quote
4. any approved quote                 -> in_repair (never backwards)
   else any rejected quote            -> attention_required
   else any sent quote                -> awaiting_approval
   else                               -> pending_quote

The resolver never raises and never touches storage. Problems with the
input (quote ids it cannot find, stored stages it does not recognise) are
returned as notes next to the result.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from shop_pipeline.database.models import Quote, WorkOrder
from shop_pipeline.pipeline.stages import (
    QuoteStatus,
    Stage,
    WorkOrderStatus,
    parse_quote_status,
    parse_stage,
    stage_index,
)
from shop_pipeline.utils.formatters import format_stage

logger = logging.getLogger(__name__)

NOTE_UNRESOLVED_REFERENCE = "unresolved_reference"
NOTE_UNKNOWN_STAGE = "unknown_stage"


@dataclass(frozen=True)
class ResolutionNote:
    """Something the resolver could not take at face value."""
    kind: str
    work_order_id: Optional[str]
    reference: str
    message: str


@dataclass(frozen=True)
class StageResolution:
    stage: Stage
    reason: str
    notes: tuple[ResolutionNote, ...] = ()

    @property
    def unresolved_quote_ids(self) -> list[str]:
        return [n.reference for n in self.notes
                if n.kind == NOTE_UNRESOLVED_REFERENCE]


def resolve_stage(
    work_order: WorkOrder,
    quotes_by_id: Optional[Mapping[str, Quote]],
) -> StageResolution:
    """Compute the stage a work order should be in right now.

    ``quotes_by_id`` may be incomplete; linked ids missing from it are
    skipped and reported as ``unresolved_reference`` notes.
    """
    notes: list[ResolutionNote] = []
    stored = work_order.stage
    current = parse_stage(stored)
    if current is None:
        notes.append(ResolutionNote(
            kind=NOTE_UNKNOWN_STAGE,
            work_order_id=work_order.id,
            reference=str(stored),
            message=f"Stored stage {stored!r} is not a known stage",
        ))
        logger.debug("Work order %s has unknown stage %r",
                     work_order.id, stored)

    if (work_order.status == WorkOrderStatus.CANCELED
            or current is Stage.CANCELED):
        return StageResolution(Stage.CANCELED, "Work order is canceled",
                               tuple(notes))

    if not work_order.has_diagnostic:
        return StageResolution(Stage.RECEPTION, "No diagnostic recorded",
                               tuple(notes))

    linked_ids = work_order.linked_quote_id_list
    if not linked_ids:
        return StageResolution(
            Stage.PENDING_QUOTE, "Diagnostic recorded, no quotes linked",
            tuple(notes),
        )

    lookup = quotes_by_id or {}
    statuses = _collect_quote_statuses(work_order, linked_ids, lookup, notes)

    if QuoteStatus.APPROVED in statuses:
        if stage_index(current) < stage_index(Stage.IN_REPAIR):
            return StageResolution(
                Stage.IN_REPAIR, "Quote approved - repair can start",
                tuple(notes),
            )
        return StageResolution(
            current,
            f"Quote approved - already at {format_stage(current)}",
            tuple(notes),
        )
    if QuoteStatus.REJECTED in statuses:
        return StageResolution(
            Stage.ATTENTION_REQUIRED, "Quote rejected - needs attention",
            tuple(notes),
        )
    if QuoteStatus.SENT in statuses:
        return StageResolution(
            Stage.AWAITING_APPROVAL, "Quote sent - awaiting client approval",
            tuple(notes),
        )
    if not any(quote_id in lookup for quote_id in linked_ids):
        # Same stage as all-draft, but the reason tells the two apart
        reason = "No linked quote could be resolved"
    else:
        reason = "Only draft quotes"
    return StageResolution(Stage.PENDING_QUOTE, reason, tuple(notes))


def _collect_quote_statuses(
    work_order: WorkOrder,
    linked_ids: list[str],
    quotes_by_id: Mapping[str, Quote],
    notes: list[ResolutionNote],
) -> set[QuoteStatus]:
    """Statuses of the resolvable linked quotes; records missing ids."""
    statuses: set[QuoteStatus] = set()
    reported: set[str] = set()
    for quote_id in linked_ids:
        quote = quotes_by_id.get(quote_id)
        if quote is None:
            if quote_id not in reported:
                reported.add(quote_id)
                notes.append(ResolutionNote(
                    kind=NOTE_UNRESOLVED_REFERENCE,
                    work_order_id=work_order.id,
                    reference=quote_id,
                    message=f"Linked quote {quote_id} not found",
                ))
                logger.debug("Work order %s links missing quote %s",
                             work_order.id, quote_id)
            continue
        status = parse_quote_status(quote.status)
        if status is not None:
            statuses.add(status)
    return statuses
