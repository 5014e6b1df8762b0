"""
Mapping document loading.

Exports the public API:
- load_configuration
- build_configuration
"""
from .load import build_configuration, load_configuration
