# src/atlas_batch/readers/rest.py
"""
Reader REST (requests).

Uma única requisição GET síncrona em `open`, para `baseUrl + endpoint`.
A resposta pode ser um array JSON ou um objeto único (normalizado para
lista de um elemento); corpo vazio resulta em zero registros.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from atlas_batch.adapters.base import positive_int_param
from atlas_batch.core.context import ExecutionContext
from atlas_batch.core.exceptions import StreamOpenError
from atlas_batch.partition.model import FileConfig


DEFAULT_TIMEOUT_MS = 30000
READ_COUNT_KEY = "rest.records.read"


class RestReader:
    def __init__(self, file_config: FileConfig, session: Optional[requests.Session] = None) -> None:
        self.file_config = file_config
        self.session = session
        self.url = f"{file_config.param('baseUrl', '')}{file_config.param('endpoint', '')}"
        self.timeout_ms = positive_int_param(file_config, "timeout", DEFAULT_TIMEOUT_MS)

        self._records: List[Dict[str, Any]] = []
        self._index = 0

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self.file_config.param("authToken")
        if token and str(token).strip():
            headers["Authorization"] = str(token)
        return headers

    def open(self, context: ExecutionContext) -> None:
        client = self.session or requests
        try:
            response = client.get(self.url, headers=self.headers(), timeout=self.timeout_ms / 1000.0)
            response.raise_for_status()
            payload = response.json() if response.content and response.content.strip() else []
        except (requests.RequestException, ValueError) as e:
            raise StreamOpenError(
                "Failed to initialize REST API reader",
                details={"url": self.url, "error": str(e)},
            ) from e

        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise StreamOpenError(
                "REST API response must be a JSON object or an array of objects",
                details={"url": self.url, "received": type(payload).__name__},
            )

        self._records = payload
        self._index = min(int(context.get(READ_COUNT_KEY, 0) or 0), len(payload))
        context.log(level="info", message="rest records loaded", url=self.url, records=len(payload))

    def read(self) -> Optional[Dict[str, Any]]:
        if self._index >= len(self._records):
            return None
        record = self._records[self._index]
        self._index += 1
        return record

    def update(self, context: ExecutionContext) -> None:
        context.put(READ_COUNT_KEY, self._index)

    def close(self) -> None:
        self._records = []
