"""
ShopEasy storefront client core: checkout validation, the checkout step
machine, cart projection and order submission over the storefront REST API.
"""

__version__ = "0.1.0"
