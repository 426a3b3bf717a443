from .serializers import (
    CategorySerializer,
    ProductSerializer,
    ProductListSerializer,
    ProductDetailSerializer,
    ProductImageSerializer,
    ProductVariantSerializer,
    VariantDraftSerializer,
    AttributeGroupSerializer,
    VariantEditingSessionSerializer,
    PriceHistorySerializer,
)

__all__ = [
    'CategorySerializer',
    'ProductSerializer',
    'ProductListSerializer',
    'ProductDetailSerializer',
    'ProductImageSerializer',
    'ProductVariantSerializer',
    'VariantDraftSerializer',
    'AttributeGroupSerializer',
    'VariantEditingSessionSerializer',
    'PriceHistorySerializer',
]
