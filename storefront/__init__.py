"""
Storefront order lifecycle and inventory service
"""
__version__ = "1.0.0"
