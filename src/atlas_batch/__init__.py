# src/atlas_batch/__init__.py
"""
Atlas Batch: engine de ETL em lote orientado a mapeamentos declarativos.

Este pacote raiz define o namespace público do Atlas Batch, um engine
projetado para ler registros de fontes heterogêneas (tabelas relacionais,
endpoints REST, arquivos delimitados/largura fixa e planilhas), aplicar
regras de transformação declarativas campo a campo e emitir registros de
largura fixa, processando partições independentes em paralelo.

Arquitetura em alto nível:
    - core.config   → carregamento, merge e hashing da configuração de lote
    - mapping       → modelo de mapeamento, carga e cache de documentos YAML
    - transform     → formatação, avaliador de expressões e engine de transformação
    - adapters      → registry de adapters de fonte por formato
    - readers       → leitores de registros em streaming
    - partition     → expansão de um job em unidades independentes
    - processor     → aplicação das regras a um registro
    - writer        → serialização de chunks em arquivo de largura fixa
    - engine        → coordenação paralela com retry/skip por chunk

Limites explícitos:
    - Não persiste configuração ou templates
    - Não agenda nem dispara jobs
    - Não armazena trilha de auditoria
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
