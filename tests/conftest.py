"""
Shared fixtures for Contabil tests.

The demo data mirrors the bookkeeping office's sample client:
"Tech Solutions Ltda" on Simples Nacional, one Banco do Brasil
account and the January/February 2025 journal.

No test touches the network: storage is always in memory.
"""

import pytest
from datetime import date
from decimal import Decimal

from contabil.audit import AuditLogger
from contabil.config import ReconciliationSettings
from contabil.models import (
    BankAccount,
    Client,
    Document,
    DocumentKind,
    JournalEntry,
    JournalLine,
    TaxRegime,
)
from contabil.orchestrator import create_app_components
from contabil.queries import LedgerQueries
from contabil.reconciliation import ReconciliationMatcher
from contabil.services.storage import Collection, InMemoryRecordStore


DEMO_CLIENT_ID = "cli_demo_001"
DEMO_BANK_ACCOUNT_ID = "ba_001"

ACCOUNT_NAMES = {
    "1.1.2": "Bancos c/ Movimento",
    "1.1.3": "Clientes a Receber",
    "1.2.1": "Imobilizado",
    "2.1.3": "Salários a Pagar",
    "4.1": "Receita de Serviços",
    "5.1.1": "Aluguel",
    "5.1.2": "Energia Elétrica",
    "5.1.3": "Internet e Telefone",
    "5.2.1": "Salários e Ordenados",
    "5.3": "Impostos e Taxas",
}


def make_entry(
    entry_id: str,
    day: str,
    memo: str,
    debit_code: str,
    credit_code: str,
    amount: str,
    client_id: str = DEMO_CLIENT_ID,
    document_id=None,
) -> JournalEntry:
    """Two-line journal entry: debit one account, credit another."""
    posted = date.fromisoformat(day)
    value = Decimal(amount)
    return JournalEntry(
        id=entry_id,
        client_id=client_id,
        date=posted,
        competence=f"{posted.year:04d}-{posted.month:02d}",
        memo=memo,
        lines=[
            JournalLine(
                account_code=debit_code,
                account_name=ACCOUNT_NAMES.get(debit_code, ""),
                debit=value,
                document_id=document_id,
            ),
            JournalLine(
                account_code=credit_code,
                account_name=ACCOUNT_NAMES.get(credit_code, ""),
                credit=value,
                document_id=document_id,
            ),
        ],
    )


def demo_client() -> Client:
    return Client(
        id=DEMO_CLIENT_ID,
        name="Tech Solutions Ltda",
        tax_id="12.345.678/0001-90",
        regime=TaxRegime.SIMPLES,
        industry_code="6201-5/01",
        address="Av. Paulista, 1000 - São Paulo/SP",
        phone="(11) 99999-1234",
        email="contato@techsolutions.com.br",
        bank_accounts=[
            BankAccount(
                id=DEMO_BANK_ACCOUNT_ID,
                bank="Banco do Brasil",
                agency="1234-5",
                account="67890-1",
            ),
        ],
    )


def demo_documents() -> list[Document]:
    return [
        Document(
            id="doc_001",
            client_id=DEMO_CLIENT_ID,
            kind=DocumentKind.NF_OUT,
            competence="2025-01",
            issued_on=date(2025, 1, 5),
            value=Decimal("15000"),
            description="NF 001 - Serviço de Consultoria TI",
            file_name="NF_001_2025.pdf",
        ),
        Document(
            id="doc_005",
            client_id=DEMO_CLIENT_ID,
            kind=DocumentKind.TAX_GUIDE,
            competence="2025-01",
            issued_on=date(2025, 1, 20),
            value=Decimal("1234.56"),
            description="DAS Janeiro/2025",
            file_name="DAS_jan2025.pdf",
        ),
    ]


def demo_entries() -> list[JournalEntry]:
    return [
        make_entry("je_001", "2025-01-05", "Receita NF 001 - Consultoria TI", "1.1.3", "4.1", "15000", document_id="doc_001"),
        make_entry("je_002", "2025-01-07", "Recebimento NF 001 via banco", "1.1.2", "1.1.3", "15000"),
        make_entry("je_003", "2025-01-08", "Pagamento aluguel janeiro", "5.1.1", "1.1.2", "2800"),
        make_entry("je_004", "2025-01-10", "Compra de equipamentos", "1.2.1", "1.1.2", "3500"),
        make_entry("je_005", "2025-01-15", "Receita NF 002 - Desenvolvimento", "1.1.3", "4.1", "8500"),
        make_entry("je_006", "2025-01-15", "Pagamento energia elétrica", "5.1.2", "1.1.2", "380"),
        make_entry("je_007", "2025-01-17", "Recebimento NF 002", "1.1.2", "1.1.3", "8500"),
        make_entry("je_008", "2025-01-20", "Pagamento DAS Janeiro", "5.3", "1.1.2", "1234.56", document_id="doc_005"),
        make_entry("je_009", "2025-01-20", "Pagamento internet", "5.1.3", "1.1.2", "199.90"),
        make_entry("je_010", "2025-01-25", "Folha de pagamento janeiro", "5.2.1", "2.1.3", "6500"),
        make_entry("je_011", "2025-01-30", "Pagamento salários janeiro", "2.1.3", "1.1.2", "6500"),
        make_entry("je_012", "2025-02-03", "Receita NF 003 - Suporte Mensal", "1.1.3", "4.1", "12000"),
    ]


def seed_demo(store: InMemoryRecordStore) -> None:
    store.save(Collection.CLIENTS, demo_client().model_dump(mode="json"))
    for document in demo_documents():
        store.save(Collection.DOCUMENTS, document.model_dump(mode="json"))
    for entry in demo_entries():
        store.save(Collection.ENTRIES, entry.model_dump(mode="json"))


def add_client(store, client_id: str, regime, **kwargs) -> Client:
    """Save a bare client; regime may be a TaxRegime or a raw stored string."""
    record = Client(id=client_id, name=f"Client {client_id}", tax_id="00.000.000/0001-00", **kwargs)
    data = record.model_dump(mode="json")
    data["regime"] = regime.value if isinstance(regime, TaxRegime) else regime
    store.save(Collection.CLIENTS, data)
    return Client.model_validate(data)


def add_entry(store, entry: JournalEntry) -> JournalEntry:
    store.save(Collection.ENTRIES, entry.model_dump(mode="json"))
    return entry


@pytest.fixture
def empty_store():
    """Store with no records at all."""
    return InMemoryRecordStore()


@pytest.fixture
def store():
    """Store seeded with the demo client and its journal."""
    store = InMemoryRecordStore()
    seed_demo(store)
    return store


@pytest.fixture
def reconciliation_settings():
    """Default thresholds, independent of the environment."""
    return ReconciliationSettings(
        suggestion_threshold=40,
        auto_match_threshold=60,
        max_confidence=99,
        exclusive_matching=False,
    )


@pytest.fixture
def matcher(reconciliation_settings):
    return ReconciliationMatcher(reconciliation_settings)


@pytest.fixture
def audit_logger(store):
    return AuditLogger(store)


@pytest.fixture
def queries(store):
    return LedgerQueries(store)


@pytest.fixture
def books(store):
    """Fully wired components over the demo store."""
    return create_app_components(store)


@pytest.fixture
def empty_books(empty_store):
    """Fully wired components over an empty store."""
    return create_app_components(empty_store)
