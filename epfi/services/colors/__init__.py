"""
EPFI Colors Module

Provides pixel buffer access, color frequency extraction, similarity
deduplication, palette refinement and striped swatch synthesis.
"""
