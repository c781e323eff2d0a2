# src/atlas_batch/mapping/cache.py
"""
Cache de memoização seguro para acesso concorrente.

Usado pelos serviços de mapeamento, que são compartilhados entre partições.
A semântica é compute-if-absent idempotente: duas threads podem calcular o
mesmo valor em paralelo, mas apenas o primeiro resultado é publicado e
todas as leituras posteriores observam o mesmo objeto.

A carga ocorre fora do lock para não serializar I/O entre partições.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Hashable, TypeVar


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class MemoCache(Generic[K, V]):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[K, V] = {}

    def get_or_compute(self, key: K, loader: Callable[[K], V]) -> V:
        with self._lock:
            if key in self._values:
                return self._values[key]

        value = loader(key)

        with self._lock:
            return self._values.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
