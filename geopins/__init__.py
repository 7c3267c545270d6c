"""
geopins — clustered, selectable annotations on an interactive PyQt5 map.

This package provides:
- Screen-space grid clustering of map annotations
- A layered overlay container with gesture dispatch
- Single-selection annotations layer with callout orchestration
- Debounced visible-region change notifications
"""

__version__ = "0.1.0"
