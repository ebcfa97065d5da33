"""Field evaluation (expansion-to-point) helpers."""
