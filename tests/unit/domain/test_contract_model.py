"""Unit tests for the contract record model."""

from datetime import date

from pydantic import ValidationError
import pytest

from contract_search.domain.model import Branch, Contract, ContractStatus, RecordPage


BACKEND_PAYLOAD = {
    "id": 42,
    "contrato": "Licença de Software ERP",
    "contratante": "Acme Ltda",
    "contratada": "Totvs S.A.",
    "objeto": "Licenciamento anual",
    "categoriaContrato": "Software",
    "filial": 5,
    "observacoes": None,
    "multa": 1500.5,
    "valorTotalContrato": 120000,
    "dataContrato": "2024-03-10T00:00:00.000Z",
    "dataFinal": "2025-03-10",
    "status": 1,
    "usuarioCriacao": "ignored",
}


@pytest.mark.unit
def test_contract_accepts_backend_payload_keys():
    contract = Contract.model_validate(BACKEND_PAYLOAD)

    assert contract.title == "Licença de Software ERP"
    assert contract.contracting_party == "Acme Ltda"
    assert contract.contracted_party == "Totvs S.A."
    assert contract.branch is Branch.SAO_PAULO
    assert contract.contract_date == date(2024, 3, 10)
    assert contract.end_date == date(2025, 3, 10)
    assert contract.penalty == 1500.5
    assert contract.is_active


@pytest.mark.unit
def test_contract_status_two_is_inactive():
    contract = Contract.model_validate({**BACKEND_PAYLOAD, "status": 2})

    assert contract.status == ContractStatus.CANCELLED
    assert not contract.is_active


@pytest.mark.unit
def test_unknown_branch_and_status_codes_are_kept_as_numbers():
    contract = Contract.model_validate({**BACKEND_PAYLOAD, "filial": 99, "status": 3})

    assert contract.branch == 99
    assert not isinstance(contract.branch, Branch)
    assert contract.branch_name == "99"
    assert contract.searchable_fields()["branch"] == "99"
    assert contract.status == 3
    assert not contract.is_active


@pytest.mark.unit
def test_searchable_fields_use_branch_display_name_and_blank_for_missing():
    contract = Contract.model_validate(BACKEND_PAYLOAD)

    fields = contract.searchable_fields()

    assert list(fields) == [
        "title",
        "contracting_party",
        "contracted_party",
        "description",
        "category",
        "branch",
        "notes",
    ]
    assert fields["branch"] == "São Paulo"
    assert fields["notes"] == ""


@pytest.mark.unit
def test_monetary_value_treats_missing_as_zero():
    contract = Contract.model_validate({**BACKEND_PAYLOAD, "multa": None})

    assert contract.monetary_value("penalty") == 0.0
    assert contract.monetary_value("total_value") == 120000.0


@pytest.mark.unit
def test_contract_is_immutable():
    contract = Contract.model_validate(BACKEND_PAYLOAD)

    with pytest.raises(ValidationError):
        contract.title = "Outro"  # type: ignore[misc]


@pytest.mark.unit
def test_record_page_reads_total_count():
    page = RecordPage.model_validate({"data": [BACKEND_PAYLOAD], "totalCount": 1})

    assert page.total == 1
    assert page.data[0].id == 42


@pytest.mark.unit
def test_branch_display_names():
    assert Branch.RIBEIRAO_PRETO.display_name == "Ribeirão Preto"
    assert Branch(1).display_name == "Rio de Janeiro"


@pytest.mark.unit
def test_record_page_skips_invalid_records(caplog):
    bad = {"id": "not-a-number", "dataContrato": "yesterday"}

    with caplog.at_level("WARNING", logger="contract_search.domain.model"):
        page = RecordPage.model_validate({"data": [BACKEND_PAYLOAD, bad, {**BACKEND_PAYLOAD, "id": 43}]})

    assert [record.id for record in page.data] == [42, 43]
    assert "Skipping invalid contract record" in caplog.text
