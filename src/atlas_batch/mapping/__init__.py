# src/atlas_batch/mapping/__init__.py
"""
Documentos de mapeamento: schema, leitura de YAML, cache e serviços de busca.
"""
