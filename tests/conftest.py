"""Shared test fixtures and configuration."""

from datetime import date

import pytest

from contract_search.adapters.history_store import InMemoryHistoryStore
from contract_search.adapters.record_source import StaticRecordSource
from contract_search.config import Settings
from contract_search.domain.model import Branch, Contract, ContractStatus
from contract_search.search.engine import SearchEngine


TODAY = date(2024, 6, 1)

# Keep every test independent of the developer's shell and .env file
TEST_ENV_KEYS = (
    "API_BASE_URL",
    "DEBOUNCE_MS",
    "MAX_RESULTS",
    "FUZZY_THRESHOLD",
    "VALUE_FIELD",
    "HISTORY_PATH",
    "ENABLE_HISTORY",
    "ENABLE_SUGGESTIONS",
    "ENABLE_ANALYTICS",
    "MIN_QUERY_LENGTH",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove settings overrides that may leak in from the environment."""
    for key in TEST_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def make_contract(record_id: int, **overrides) -> Contract:
    """Build a contract with sensible defaults for the fields a test does not care about."""
    fields = {
        "id": record_id,
        "title": f"Contrato {record_id}",
        "contracting_party": "Acme Ltda",
        "contracted_party": "Fornecedor Genérico",
        "description": "",
        "category": "Outros",
        "branch": Branch.SAO_PAULO,
        "contract_date": date(2024, 1, 1),
    }
    fields.update(overrides)
    return Contract(**fields)


@pytest.fixture
def contract_factory():
    return make_contract


@pytest.fixture
def contracts() -> list[Contract]:
    """Three active contracts plus one cancelled one."""
    return [
        make_contract(
            1,
            title="Licença de Software ERP",
            contracted_party="Totvs S.A.",
            description="Licenciamento de software de gestão empresarial para todas as filiais",
            category="Software",
            branch=Branch.SAO_PAULO,
            notes="Renovação anual",
            penalty=10000.0,
            total_value=120000.0,
            contract_date=date(2024, 3, 10),
        ),
        make_contract(
            2,
            title="Aluguel do escritório central",
            contracted_party="Imobiliária Horizonte",
            description="Locação do imóvel comercial na Avenida Paulista",
            category="Aluguel",
            branch=Branch.SAO_PAULO,
            penalty=3000.0,
            total_value=360000.0,
            contract_date=date(2023, 6, 1),
        ),
        make_contract(
            3,
            title="Suporte técnico de TI",
            contracted_party="Infra Serviços",
            description="Manutenção de servidores e suporte técnico",
            category="TI",
            branch=Branch.RIO_DE_JANEIRO,
            notes="Atendimento 24 horas",
            penalty=2000.0,
            total_value=50000.0,
            contract_date=date(2024, 1, 15),
        ),
        make_contract(
            4,
            title="Consultoria jurídica",
            contracted_party="Advocacia Pereira",
            description="Assessoria jurídica trabalhista",
            category="Outros",
            branch=Branch.CAMPINAS,
            penalty=1500.0,
            contract_date=date(2022, 1, 1),
            status=ContractStatus.CANCELLED,
        ),
    ]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with a short debounce and a history file inside tmp_path."""
    return Settings(debounce_ms=10, history_path=tmp_path / "history.json")


@pytest.fixture
def engine(settings, contracts) -> SearchEngine:
    """Engine with the sample contracts indexed and a fixed 'today'."""
    search_engine = SearchEngine(settings, today=lambda: TODAY)
    search_engine.rebuild(contracts, fingerprint="sample")
    return search_engine


@pytest.fixture
def history_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def record_source(contracts) -> StaticRecordSource:
    return StaticRecordSource(contracts)
