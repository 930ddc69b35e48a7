"""
EPFI - Extract Palette From Image

Palette extraction, similarity refinement and striped swatch rendering
for raster images.
"""

__version__ = "1.0.0"
