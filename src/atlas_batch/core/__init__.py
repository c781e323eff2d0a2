# src/atlas_batch/core/__init__.py
"""
Core do Atlas Batch.

Este pacote reúne as estruturas transversais do engine, independentes de
qualquer formato de fonte ou regra de mapeamento específica:

    - config      → carregamento, merge determinístico e hashing da configuração
    - context     → contexto de execução por partição (checkpoint, eventos, warnings)
    - types       → status e resultados imutáveis de partições e jobs
    - protocols   → contratos de reader, processor e writer
    - exceptions  → exceções tipadas com dados estruturados
    - errors      → payload canônico e serializável de erro

Princípios fundamentais:
    - Nenhum estado global compartilhado
    - Erros são tipados e carregam detalhes estruturados
    - Logs são eventos explícitos associados a uma partição

Limites explícitos:
    - Não lê fontes de dados
    - Não aplica regras de transformação
    - Não agenda execuções
"""
