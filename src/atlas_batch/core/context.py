# src/atlas_batch/core/context.py
"""
Contexto de execução de uma partição.

O `ExecutionContext` é passado a reader e writer em `open`/`update` e ao
coordinator durante todo o ciclo de vida da partição. Ele concentra:

    - identidade da execução (run_id, partition_key)
    - estado de checkpoint escrito pelos streams (`update(context)`)
    - eventos de log estruturados
    - warnings não fatais

Invariantes:
    - Cada partição possui seu próprio contexto (nenhum compartilhamento)
    - Eventos incluem sempre `run_id` e `partition_key`

Limites explícitos:
    - Não persiste checkpoint (restart é responsabilidade externa)
    - Não executa leitura nem escrita
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


@dataclass
class ExecutionContext:
    run_id: str
    partition_key: str
    meta: Dict[str, Any] = field(default_factory=dict)

    _state: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: List[str] = field(default_factory=list, init=False)

    # -----------------------------
    # Checkpoint state
    # -----------------------------
    def put(self, key: str, value: Any) -> None:
        self._state[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._state.get(key, default)

    def contains(self, key: str) -> bool:
        return key in self._state

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._state)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "partition_key": self.partition_key,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(self.meta)
        event.update(extra)
        self.events.append(event)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class EventLog:
    """
    Trilha de eventos de componentes compartilhados entre partições
    (registry de adapters, serviços de mapeamento).

    Append protegido por lock; leitura retorna cópia.
    """

    def __init__(self, component: str) -> None:
        self.component = component
        self._lock = threading.Lock()
        self._events: List[Dict[str, Any]] = []

    def record(self, *, level: str, message: str, **extra: Any) -> None:
        event = {
            "component": self.component,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._events)
