# src/atlas_batch/readers/__init__.py
"""
Readers por formato de fonte.

Contrato comum (ItemReader): `open(context)`, `read()`, `update(context)`,
`close()`. `read()` retorna None ao esgotar a fonte. Falhas de abertura são
StreamOpenError; configuração inválida é ConfigurationError.
"""
