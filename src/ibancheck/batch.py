from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ibancheck.errors import IbanError
from ibancheck.iban import Iban, parse_iban
from ibancheck.utils.log_context import log_scope, new_batch_id
from ibancheck.utils.logging_setup import log_event

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    index: int
    raw: str
    iban: Optional[Iban] = None
    error: Optional[IbanError] = None

    @property
    def ok(self) -> bool:
        return self.iban is not None


def validate_many(values: Iterable[str], *, source: Optional[str] = None) -> List[ValidationResult]:
    """Validuje sadu IBANů (řetězců); chyby IbanError vrací jako hodnoty.

    Hodnota, která není str, je chyba volajícího a vyhodí TypeError (None projde jako prázdný vstup).

    Každý záznam běží ve vlastním log scope (batch_id, source, record_index).
    """
    batch_id = new_batch_id()
    results: List[ValidationResult] = []
    with log_scope(batch_id=batch_id, source=source):
        for idx, raw in enumerate(values):
            with log_scope(record_index=idx):
                try:
                    results.append(ValidationResult(index=idx, raw=raw, iban=parse_iban(raw)))
                except IbanError as e:
                    results.append(ValidationResult(index=idx, raw=raw, error=e))

        by_code = Counter(r.error.code for r in results if r.error is not None)
        valid = sum(1 for r in results if r.ok)
        log_event(
            log,
            "iban.batch.done",
            "IBAN batch validated",
            batch_id=batch_id,
            source=source,
            total=len(results),
            valid=valid,
            invalid=len(results) - valid,
            errors=dict(by_code),
        )
    return results
