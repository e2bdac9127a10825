from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator

# Context proměnné – udržují se per-thread/async task.
batch_id_var = contextvars.ContextVar("batch_id", default=None)
source_var = contextvars.ContextVar("source", default=None)
record_index_var = contextvars.ContextVar("record_index", default=None)

_VARS: Dict[str, contextvars.ContextVar] = {
    "batch_id": batch_id_var,
    "source": source_var,
    "record_index": record_index_var,
}


def new_batch_id() -> str:
    return str(uuid.uuid4())


def get_context_fields() -> Dict[str, Any]:
    """Vrátí současný stav všech context proměnných jako dict."""
    return {name: var.get() for name, var in _VARS.items()}


@contextmanager
def log_scope(**fields: Any) -> Iterator[None]:
    """
    Dočasně nastaví vybrané context proměnné; po opuštění scope se obnoví.
    Neznámé klíče jsou chyba volajícího.
    """
    unknown = set(fields) - set(_VARS)
    if unknown:
        raise KeyError(f"Unknown log context fields: {sorted(unknown)}")
    tokens = {name: _VARS[name].set(value) for name, value in fields.items()}
    try:
        yield
    finally:
        for name, tok in tokens.items():
            _VARS[name].reset(tok)
