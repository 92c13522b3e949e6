"""
End-to-end tests over the wired components.
"""

import pytest
from datetime import date
from decimal import Decimal

from contabil.models import TaxPeriodStatus, TaxType
from contabil.orchestrator import Bookkeeper, create_app_components, create_store
from contabil.services.storage import Collection, InMemoryRecordStore

from conftest import DEMO_CLIENT_ID, add_client


class TestWiring:
    """Tests for the component factory."""

    def test_components_share_the_store(self, books, store):
        """Test every component works over the given store."""
        assert isinstance(books, Bookkeeper)
        assert books.store is store
        assert books.get_client(DEMO_CLIENT_ID).name == "Tech Solutions Ltda"
        assert books.get_client("cli_missing") is None

    def test_default_store_is_memory(self, monkeypatch):
        """Test the memory backend is the default."""
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        assert isinstance(create_store(), InMemoryRecordStore)
        assert isinstance(create_app_components().store, InMemoryRecordStore)


class TestApportionAndSave:
    """Tests for the month close flow."""

    def test_demo_client_january(self, books, store):
        """Test the demo client's DAS is computed and saved."""
        period = books.apportion_and_save(DEMO_CLIENT_ID, "2025-01")

        # RBT12 282,000 falls in the second bracket; DAS = 23,500 x 7.8809%
        assert period.status == TaxPeriodStatus.COMPUTED
        assert [(i.tax_type, i.value, i.due_date) for i in period.items] == [
            (TaxType.DAS, Decimal("1852.00"), date(2025, 2, 20)),
        ]
        assert store.count(Collection.TAX_PERIODS) == 1

    def test_rerun_is_idempotent(self, books, store):
        """Test closing the same month twice keeps one period."""
        first = books.apportion_and_save(DEMO_CLIENT_ID, "2025-01")
        second = books.apportion_and_save(DEMO_CLIENT_ID, "2025-01")

        assert second.id == first.id
        assert store.count(Collection.TAX_PERIODS) == 1

    def test_unknown_client(self, books, store):
        """Test a missing client yields None and writes nothing."""
        assert books.apportion_and_save("cli_missing", "2025-01") is None
        assert store.count(Collection.TAX_PERIODS) == 0

    def test_unknown_regime(self, books, store):
        """Test an unrecognized regime yields None and writes nothing."""
        add_client(store, "cli_weird", "Lucro Arbitrado")

        assert books.apportion_and_save("cli_weird", "2025-01") is None
        assert store.count(Collection.TAX_PERIODS) == 0
        assert store.count(Collection.AUDIT_LOGS) == 0

    def test_import_then_close(self, books, store):
        """Test a statement import and month close over one store."""
        rows = [
            {"Data": "08/01/2025", "Histórico": "PAG BOLETO - ALUGUEL", "Valor": "-2.800,00"},
            {"Data": "15/01/2025", "Histórico": "DEB AUTOMATICO - ENERGIA", "Valor": "-380,00"},
        ]
        imported = books.importer.import_rows(
            DEMO_CLIENT_ID, ["Data", "Histórico", "Valor"], rows, "extrato_bb_jan.csv",
        )
        period = books.apportion_and_save(DEMO_CLIENT_ID, "2025-01")

        assert imported.matched_count == 2
        assert period is not None
        assert [log["entity"] for log in store.get_all(Collection.AUDIT_LOGS)] == [
            "bank_import",
            "tax_period",
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
