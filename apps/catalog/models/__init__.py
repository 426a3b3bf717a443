"""
Catalog models for the equipment store.

Model Hierarchy:
- Category: Two-level product categories (root > sub-category)
- Product: Catalog entry (e.g., "Máy khoan Bosch GSB 550")
- ProductImage: Gallery images for a product, one of them the thumbnail
- ProductVariant: One attribute combination with its own price, stock, SKU
- PriceHistory: Audit trail of variant price changes
"""

from .category import Category
from .product import Product, ProductImage
from .variant import ProductVariant
from .price_history import PriceHistory

__all__ = [
    'Category',
    'Product',
    'ProductImage',
    'ProductVariant',
    'PriceHistory',
]
