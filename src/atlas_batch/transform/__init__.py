# src/atlas_batch/transform/__init__.py
"""
Camada de transformação de campos.

    - formatting   → padding, truncamento, picture numérico e datas
    - expressions  → avaliadores de condição (gramática simples e estendida)
    - engine       → dispatch por tipo de transformação e política de degradação
"""
