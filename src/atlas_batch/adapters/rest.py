# src/atlas_batch/adapters/rest.py
"""Adapter REST: `rest`, `api`, `http`, `https` (prioridade 50)."""

from __future__ import annotations

from typing import Optional

import requests

from atlas_batch.core.exceptions import ConfigurationError
from atlas_batch.partition.model import FileConfig
from atlas_batch.readers.rest import DEFAULT_TIMEOUT_MS, RestReader

from .base import BaseAdapter, positive_int_param, require_param


class RestAdapter(BaseAdapter):
    name = "rest"
    priority = 50
    formats = frozenset({"rest", "api", "http", "https"})

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.session = session

    def validate(self, file_config: FileConfig) -> None:
        base_url = require_param(file_config, "baseUrl", "REST adapter requires 'baseUrl' parameter")
        require_param(file_config, "endpoint", "REST adapter requires 'endpoint' parameter")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigurationError("baseUrl must start with http:// or https://", details={"baseUrl": base_url})
        positive_int_param(file_config, "timeout", DEFAULT_TIMEOUT_MS)

    def create_reader(self, file_config: FileConfig) -> RestReader:
        return RestReader(file_config, session=self.session)
