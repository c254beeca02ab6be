"""Tests for dataclass model properties and computed fields."""

from shop_pipeline.database.models import WorkOrder


class TestWorkOrderProperties:
    def test_diagnostic_dict(self):
        wo = WorkOrder(diagnostic_data='{"mileage": "120000"}')
        assert wo.diagnostic_dict == {"mileage": "120000"}
        assert wo.has_diagnostic is True

    def test_empty_diagnostic(self):
        assert WorkOrder(diagnostic_data="{}").has_diagnostic is False
        assert WorkOrder(diagnostic_data="").has_diagnostic is False
        assert WorkOrder(diagnostic_data=None).has_diagnostic is False

    def test_diagnostic_bad_json(self):
        assert WorkOrder(diagnostic_data="{oops").diagnostic_dict == {}

    def test_diagnostic_not_an_object(self):
        assert WorkOrder(diagnostic_data='["a"]').diagnostic_dict == {}

    def test_linked_quote_id_list(self):
        wo = WorkOrder(linked_quote_ids='["COT-0001", "COT-0002"]')
        assert wo.linked_quote_id_list == ["COT-0001", "COT-0002"]

    def test_linked_ids_keep_order(self):
        wo = WorkOrder(linked_quote_ids='["b", "a", "c"]')
        assert wo.linked_quote_id_list == ["b", "a", "c"]

    def test_linked_ids_bad_json(self):
        assert WorkOrder(linked_quote_ids="COT-1").linked_quote_id_list == []

    def test_linked_ids_not_a_list(self):
        assert WorkOrder(linked_quote_ids='{"a": 1}').linked_quote_id_list == []

    def test_is_canceled(self):
        assert WorkOrder(status="canceled").is_canceled is True
        assert WorkOrder(stage="canceled").is_canceled is True
        assert WorkOrder().is_canceled is False

    def test_defaults(self):
        wo = WorkOrder()
        assert wo.stage == "reception"
        assert wo.status == "scheduled"
        assert wo.linked_quote_id_list == []
