# src/atlas_batch/adapters/__init__.py
"""
Adapters de fonte de dados.

Um adapter reconhece um token de formato (`params.format`), valida o
FileConfig segundo suas próprias regras e constrói o reader da partição.
A resolução formato → adapter é feita pelo AdapterRegistry.
"""
