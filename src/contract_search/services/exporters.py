"""Result exporters keyed by format name.

CSV and JSON are built in. Other formats (for example ``pdf``) are handed to
whatever exporter the host application registers for them.
"""

from collections.abc import Callable, Sequence
import csv
import io
import logging
from typing import Any

import orjson

from contract_search.domain.search import SearchResult


logger = logging.getLogger(__name__)

ResultExporter = Callable[[Sequence[SearchResult]], Any]

EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "title",
    "contracting_party",
    "contracted_party",
    "category",
    "branch",
    "contract_date",
    "value",
    "relevance_score",
    "match_type",
)


def _row(result: SearchResult, value_field: str) -> dict[str, Any]:
    record = result.record
    return {
        "id": record.id,
        "title": record.title,
        "contracting_party": record.contracting_party,
        "contracted_party": record.contracted_party,
        "category": record.category,
        "branch": record.branch_name,
        "contract_date": record.contract_date.isoformat(),
        "value": record.monetary_value(value_field),
        "relevance_score": result.relevance_score,
        "match_type": result.match_type.value,
    }


def export_csv(results: Sequence[SearchResult], value_field: str = "penalty") -> str:
    """Render results as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for result in results:
        writer.writerow(_row(result, value_field))
    return buffer.getvalue()


def export_json(results: Sequence[SearchResult], value_field: str = "penalty") -> bytes:
    """Render results as a JSON array."""
    return orjson.dumps([_row(result, value_field) for result in results])


class ExporterRegistry:
    """Maps format names to exporters."""

    def __init__(self, value_field: str = "penalty") -> None:
        self._exporters: dict[str, ResultExporter] = {
            "csv": lambda results: export_csv(results, value_field),
            "json": lambda results: export_json(results, value_field),
        }

    def register(self, fmt: str, exporter: ResultExporter) -> None:
        self._exporters[fmt.lower()] = exporter

    def formats(self) -> list[str]:
        return sorted(self._exporters)

    def export(self, fmt: str, results: Sequence[SearchResult]) -> Any:
        """Run the exporter for ``fmt``; returns None when it is missing or fails."""
        exporter = self._exporters.get(fmt.lower())
        if exporter is None:
            logger.warning("No exporter registered for format %r (available: %s)", fmt, self.formats())
            return None
        try:
            output = exporter(results)
        except Exception as exc:
            logger.error(f"Exporter {fmt!r} failed: {exc}", exc_info=True)
            return None
        logger.info("Exported %d results as %s", len(results), fmt)
        return output
