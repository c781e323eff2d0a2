"""Writers de saída."""
