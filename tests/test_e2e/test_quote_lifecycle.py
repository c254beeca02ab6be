"""End-to-end: a work order moving through the pipeline as quotes change."""

import json

import pytest

from shop_pipeline.config import Config
from shop_pipeline.database.models import Quote, WorkOrder
from shop_pipeline.pipeline.reconcile import (
    apply_quote_status_change,
    reconcile_work_orders,
)
from shop_pipeline.pipeline.summary import summarize_pipeline


@pytest.fixture(autouse=True)
def reconcile_defaults(monkeypatch):
    monkeypatch.setattr(Config, "RECONCILE_SKIP_DELIVERED", True)
    monkeypatch.setattr(Config, "RECONCILE_NOTIFY", True)


class TestQuoteLifecycle:
    def test_full_lifecycle(self, repo):
        # Intake: no diagnostic yet
        wo_id = repo.create_work_order(WorkOrder(
            client_name="Ana Ruiz", vehicle="Nissan Sentra (JKL-456)",
            service_requested="Engine light on", stage="diagnostic",
        ))
        reconcile_work_orders(repo)
        assert repo.get_work_order_by_id(wo_id).stage == "reception"

        # Diagnostic recorded
        wo = repo.get_work_order_by_id(wo_id)
        wo.diagnostic_data = json.dumps({"notes": "O2 sensor fault"})
        repo.update_work_order(wo)
        reconcile_work_orders(repo)
        assert repo.get_work_order_by_id(wo_id).stage == "pending_quote"

        # Draft quote, then sent
        quote_id = repo.create_quote(Quote(work_order_id=wo_id, total=420.0))
        assert apply_quote_status_change(
            repo, repo.get_quote_by_id(quote_id)) is None
        quote = repo.update_quote_status(quote_id, "sent")
        change = apply_quote_status_change(repo, quote)
        assert change.new_stage == "awaiting_approval"

        # Client rejects, advisor issues a revised quote that gets approved
        apply_quote_status_change(
            repo, repo.update_quote_status(quote_id, "rejected"))
        assert repo.get_work_order_by_id(wo_id).stage == "attention_required"

        revised_id = repo.create_quote(Quote(work_order_id=wo_id,
                                             total=380.0))
        apply_quote_status_change(
            repo, repo.update_quote_status(revised_id, "approved"))
        wo = repo.get_work_order_by_id(wo_id)
        assert wo.stage == "in_repair"
        assert wo.linked_quote_id_list == [quote_id, revised_id]

        # Workshop moves it on by hand; reconciliation leaves it there
        repo.update_work_order_stage(wo_id, "ready_for_delivery")
        report = reconcile_work_orders(repo)
        assert report.updated == 0
        assert repo.get_work_order_by_id(wo_id).stage == "ready_for_delivery"

        history = [h.stage for h in repo.get_stage_history(wo_id)]
        assert history == [
            "reception", "pending_quote", "awaiting_approval",
            "attention_required", "in_repair",
        ]

    def test_cancel_then_reconcile(self, repo):
        wo_id = repo.create_work_order(WorkOrder(
            stage="awaiting_approval",
            diagnostic_data=json.dumps({"notes": "ok"}),
        ))
        wo = repo.get_work_order_by_id(wo_id)
        wo.status = "canceled"
        repo.update_work_order(wo)

        report = reconcile_work_orders(repo)
        assert report.updated == 0
        assert repo.get_work_order_by_id(wo_id).stage == "canceled"

    def test_summary_after_reconcile(self, repo):
        ids = []
        for stage, quote_status in [("pending_quote", "approved"),
                                    ("pending_quote", "sent"),
                                    ("pending_quote", None)]:
            wo_id = repo.create_work_order(WorkOrder(
                stage=stage, diagnostic_data=json.dumps({"notes": "ok"}),
            ))
            if quote_status:
                qid = repo.create_quote(Quote(work_order_id=wo_id,
                                              status=quote_status))
                repo.set_linked_quote_ids(wo_id, [qid])
            ids.append(wo_id)

        before = summarize_pipeline(repo.get_all_work_orders())
        assert before.suspect_ids == ids[:2]

        reconcile_work_orders(repo)
        after = summarize_pipeline(repo.get_all_work_orders())
        assert after.suspect_ids == []
        assert after.by_stage == {
            "in_repair": 1, "awaiting_approval": 1, "pending_quote": 1,
        }
