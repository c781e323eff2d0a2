"""Processors: transformam um registro de entrada em um registro de saída ordenado."""
