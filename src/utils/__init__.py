"""
Utility modules for the upsell service
"""
from .config_loader import UpsellConfig, load_upsell_config, resolve_collection_ref

__all__ = [
    'UpsellConfig',
    'load_upsell_config',
    'resolve_collection_ref',
]
