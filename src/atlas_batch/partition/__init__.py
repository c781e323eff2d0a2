# src/atlas_batch/partition/__init__.py
"""Unidades de trabalho (FileConfig, PartitionUnit) e o partitioner de jobs."""
