"""
stitchcraft: gauge-driven stitch/row calculation and row-by-row knitting and
crochet instruction generation.

The public entry point is :func:`stitchcraft.api.generate.generate_pattern`.
"""

__version__ = "0.1.0"
