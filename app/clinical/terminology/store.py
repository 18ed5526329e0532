"""Query interface the terminology engine consumes.

Implemented by ``app.repositories.terminology_repository.SqlTerminologyStore``
and ``app.repositories.memory_store.InMemoryTerminologyStore``.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from app.clinical.terminology.records import TerminologyRecord


class TerminologyStore(Protocol):
    def find_exact(self, value: str, *, fields: Sequence[str]) -> list[TerminologyRecord]:
        """Records where any of ``fields`` equals ``value``, in store order."""
        ...

    def find_top_by_traditional_code(self, value: str) -> Optional[TerminologyRecord]:
        """Highest-confidence record with ``traditional_code == value``."""
        ...

    def find_all_matching_all_terms(
        self,
        terms: Sequence[str],
        fields: Sequence[str],
    ) -> list[TerminologyRecord]:
        """Records where every term is a case-insensitive substring of at least one field."""
        ...
