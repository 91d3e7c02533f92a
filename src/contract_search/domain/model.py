"""Domain model - the contract record and its enumerations.

Records are read-only snapshots owned by the caller. The model accepts the
backend's camelCase Portuguese payload keys as aliases so API responses can be
validated directly, while the rest of the code base uses English attribute
names.
"""

from datetime import date, datetime
from enum import IntEnum
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = logging.getLogger(__name__)


class ContractStatus(IntEnum):
    """Liveness flag; only active contracts are searchable."""

    ACTIVE = 1
    CANCELLED = 2


class Branch(IntEnum):
    """Company branch (``filial``) codes used by the backend."""

    RIO_DE_JANEIRO = 1
    CAMPINAS = 2
    BRASILIA = 3
    CURITIBA = 4
    SAO_PAULO = 5
    JOINVILLE = 6
    BELO_HORIZONTE = 7
    SALVADOR = 8
    VITORIA = 9
    RECIFE = 10
    MANAUS = 11
    ZONA_DA_MATA_MINEIRA = 12
    RIBEIRAO_PRETO = 13
    NOVA_IORQUE = 14
    ORLANDO = 15

    @property
    def display_name(self) -> str:
        return _BRANCH_NAMES[self]


_BRANCH_NAMES: dict[Branch, str] = {
    Branch.RIO_DE_JANEIRO: "Rio de Janeiro",
    Branch.CAMPINAS: "Campinas",
    Branch.BRASILIA: "Brasília",
    Branch.CURITIBA: "Curitiba",
    Branch.SAO_PAULO: "São Paulo",
    Branch.JOINVILLE: "Joinville",
    Branch.BELO_HORIZONTE: "Belo Horizonte",
    Branch.SALVADOR: "Salvador",
    Branch.VITORIA: "Vitória",
    Branch.RECIFE: "Recife",
    Branch.MANAUS: "Manaus",
    Branch.ZONA_DA_MATA_MINEIRA: "Zona da Mata Mineira",
    Branch.RIBEIRAO_PRETO: "Ribeirão Preto",
    Branch.NOVA_IORQUE: "Nova Iorque",
    Branch.ORLANDO: "Orlando",
}

# Order matters: field position is part of the per-field index key
SEARCHABLE_FIELDS: tuple[str, ...] = (
    "title",
    "contracting_party",
    "contracted_party",
    "description",
    "category",
    "branch",
    "notes",
)


class Contract(BaseModel):
    """A business contract as delivered by the record source."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int
    title: str = Field(default="", alias="contrato")
    contracting_party: str = Field(default="", alias="contratante")
    contracted_party: str = Field(default="", alias="contratada")
    description: str = Field(default="", alias="objeto")
    category: str = Field(default="", alias="categoriaContrato")
    # Codes outside the known enumeration are kept as plain integers
    branch: Branch | int | None = Field(default=None, alias="filial", union_mode="left_to_right")
    notes: str | None = Field(default=None, alias="observacoes")
    penalty: float | None = Field(default=None, alias="multa")
    total_value: float | None = Field(default=None, alias="valorTotalContrato")
    contract_date: date = Field(alias="dataContrato")
    end_date: date | None = Field(default=None, alias="dataFinal")
    # Plain integer: the backend may send statuses this client does not know
    status: int = ContractStatus.ACTIVE

    @field_validator("contract_date", "end_date", mode="before")
    @classmethod
    def _parse_iso_date(cls, value: Any) -> Any:
        # Backend timestamps carry a time part; only the calendar date matters
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
            return value[:10]
        return value

    @property
    def is_active(self) -> bool:
        return self.status == ContractStatus.ACTIVE

    @property
    def branch_name(self) -> str:
        if self.branch is None:
            return ""
        if isinstance(self.branch, Branch):
            return self.branch.display_name
        return str(self.branch)

    def field_text(self, field_name: str) -> str:
        """Return the display text of a searchable field."""
        if field_name == "branch":
            return self.branch_name
        value = getattr(self, field_name)
        return value or ""

    def searchable_fields(self) -> dict[str, str]:
        """Return every searchable field in index order."""
        return {name: self.field_text(name) for name in SEARCHABLE_FIELDS}

    def monetary_value(self, field_name: str = "penalty") -> float:
        """Return the monetary attribute named ``field_name``, treating missing values as zero."""
        value = getattr(self, field_name)
        return float(value) if value is not None else 0.0


class RecordPage(BaseModel):
    """One page of records returned by the record source."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data: list[Contract] = Field(default_factory=list)
    total: int | None = Field(default=None, alias="totalCount")

    @field_validator("data", mode="before")
    @classmethod
    def _skip_invalid_records(cls, value: Any) -> Any:
        # One malformed record costs that record, not the whole page
        if not isinstance(value, list):
            return value
        records: list[Contract] = []
        for item in value:
            try:
                records.append(Contract.model_validate(item))
            except ValidationError as exc:
                record_id = item.get("id") if isinstance(item, dict) else None
                logger.warning(
                    "Skipping invalid contract record",
                    extra={"record_id": record_id, "errors": exc.error_count()},
                )
        return records
