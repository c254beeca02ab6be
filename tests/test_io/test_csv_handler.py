"""Tests for CSV import/export."""

import csv
import json

import pytest

from shop_pipeline.config import Config
from shop_pipeline.database.models import Quote, WorkOrder
from shop_pipeline.io.csv_handler import (
    export_quotes_csv,
    export_reconciliation_csv,
    export_work_orders_csv,
    import_quotes_csv,
    import_work_orders_csv,
)
from shop_pipeline.pipeline.reconcile import reconcile_work_orders


@pytest.fixture(autouse=True)
def numbering(monkeypatch):
    monkeypatch.setattr(Config, "WORK_ORDER_PREFIX", "OT")
    monkeypatch.setattr(Config, "QUOTE_PREFIX", "COT")


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


class TestCSVExport:
    def test_export_work_orders(self, repo, tmp_path):
        repo.create_work_order(WorkOrder(
            client_name="Ana Ruiz",
            stage="awaiting_approval",
            diagnostic_data=json.dumps({"notes": "ok"}),
            linked_quote_ids=json.dumps(["COT-0001", "COT-0002"]),
        ))
        outfile = tmp_path / "out" / "work_orders.csv"
        assert export_work_orders_csv(repo, outfile) == 1

        rows = read_rows(outfile)
        assert rows[0]["id"] == "OT-0001"
        assert rows[0]["stage"] == "awaiting_approval"
        assert rows[0]["linked_quote_ids"] == "COT-0001;COT-0002"

    def test_export_quotes(self, repo, tmp_path):
        wo_id = repo.create_work_order(WorkOrder())
        repo.create_quote(Quote(work_order_id=wo_id, status="sent",
                                total=99.5))
        outfile = tmp_path / "quotes.csv"
        assert export_quotes_csv(repo, outfile) == 1
        rows = read_rows(outfile)
        assert rows[0]["status"] == "sent"
        assert rows[0]["work_order_id"] == wo_id

    def test_export_reconciliation(self, repo, stored_order, tmp_path):
        wo = stored_order(stage="pending_quote", quotes=["approved"])
        repo.set_linked_quote_ids(
            wo.id, wo.linked_quote_id_list + ["COT-0404"],
        )
        report = reconcile_work_orders(repo, notify=False)

        outfile = tmp_path / "reconcile.csv"
        assert export_reconciliation_csv(report, outfile) == 1
        rows = read_rows(outfile)
        assert rows[0]["work_order_id"] == wo.id
        assert rows[0]["previous_stage"] == "pending_quote"
        assert rows[0]["new_stage"] == "in_repair"
        assert rows[0]["unresolved_quotes"] == "COT-0404"


class TestCSVImport:
    def test_import_work_orders(self, repo, tmp_path):
        csv_file = tmp_path / "import.csv"
        csv_file.write_text(
            "id,client_name,stage,status,diagnostic_data,linked_quote_ids\n"
            'OT-0100,Ana,diagnostic,scheduled,"{""notes"": ""ok""}",'
            "COT-1;COT-2\n"
            ",Luis,,,,\n",
            encoding="utf-8",
        )
        results = import_work_orders_csv(repo, csv_file)
        assert results["imported"] == 2
        assert not results["errors"]

        wo = repo.get_work_order_by_id("OT-0100")
        assert wo.diagnostic_dict == {"notes": "ok"}
        assert wo.linked_quote_id_list == ["COT-1", "COT-2"]

        luis = repo.search_work_orders("Luis")[0]
        assert luis.stage == "reception"
        assert luis.status == "scheduled"

    def test_mixed_explicit_and_generated_ids(self, repo, tmp_path):
        csv_file = tmp_path / "mixed.csv"
        csv_file.write_text("id,client_name\nOT-0001,A\n,B\n,C\n",
                            encoding="utf-8")
        results = import_work_orders_csv(repo, csv_file)
        assert results["imported"] == 3
        assert not results["errors"]
        assert [wo.client_name for wo in repo.get_all_work_orders()] == [
            "A", "B", "C",
        ]
        assert repo.get_work_order_by_id("OT-0001").client_name == "A"

    def test_invalid_rows_skipped(self, repo, tmp_path):
        csv_file = tmp_path / "bad.csv"
        csv_file.write_text(
            "id,stage\nOT-1,Entregado\nOT-2,delivered\n", encoding="utf-8",
        )
        results = import_work_orders_csv(repo, csv_file)
        assert results["imported"] == 1
        assert results["skipped"] == 1
        assert "Row 2" in results["errors"][0]

    def test_existing_skipped_unless_update(self, repo, tmp_path):
        repo.create_work_order(WorkOrder(id="OT-7", client_name="Old"))
        csv_file = tmp_path / "dup.csv"
        csv_file.write_text("id,client_name\nOT-7,New\n", encoding="utf-8")

        results = import_work_orders_csv(repo, csv_file)
        assert results["skipped"] == 1
        assert repo.get_work_order_by_id("OT-7").client_name == "Old"

        results = import_work_orders_csv(repo, csv_file, update_existing=True)
        assert results["updated"] == 1
        assert repo.get_work_order_by_id("OT-7").client_name == "New"

    def test_missing_file_reported(self, repo, tmp_path):
        results = import_work_orders_csv(repo, tmp_path / "nope.csv")
        assert results["imported"] == 0
        assert results["errors"][0].startswith("File error")

    def test_import_quotes_links_work_order(self, repo, tmp_path):
        repo.create_work_order(WorkOrder(id="OT-1"))
        csv_file = tmp_path / "quotes.csv"
        csv_file.write_text(
            "id,work_order_id,status,total\n"
            "COT-A,OT-1,sent,150\n"
            ",OT-1,,\n",
            encoding="utf-8",
        )
        results = import_quotes_csv(repo, csv_file)
        assert results["imported"] == 2

        linked = repo.get_work_order_by_id("OT-1").linked_quote_id_list
        assert linked == ["COT-A", "COT-0001"]
        assert repo.get_quote_by_id("COT-0001").status == "draft"

    def test_import_quotes_unknown_work_order(self, repo, tmp_path):
        csv_file = tmp_path / "quotes.csv"
        csv_file.write_text(
            "id,work_order_id,status\nCOT-A,OT-404,sent\n", encoding="utf-8",
        )
        results = import_quotes_csv(repo, csv_file)
        assert results["skipped"] == 1
        assert "OT-404 not found" in results["errors"][0]

    def test_import_quotes_update_status(self, repo, tmp_path):
        repo.create_work_order(WorkOrder(id="OT-1"))
        repo.create_quote(Quote(id="COT-A", work_order_id="OT-1"))
        csv_file = tmp_path / "quotes.csv"
        csv_file.write_text(
            "id,work_order_id,status\nCOT-A,OT-1,approved\n",
            encoding="utf-8",
        )
        results = import_quotes_csv(repo, csv_file, update_existing=True)
        assert results["updated"] == 1
        assert repo.get_quote_by_id("COT-A").status == "approved"
        assert repo.get_work_order_by_id("OT-1").linked_quote_id_list == [
            "COT-A"
        ]
