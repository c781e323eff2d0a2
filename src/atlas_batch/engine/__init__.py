"""Execução de jobs: políticas de falha, coordinator de partições e runner."""
