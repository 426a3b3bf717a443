from django_filters import rest_framework as filters
from apps.catalog.models import Category, Product, ProductVariant


class ProductFilter(filters.FilterSet):
    """Filter products by category (including sub-categories), brand and price."""

    category = filters.NumberFilter(method='filter_category')
    brand = filters.CharFilter(field_name='brand', lookup_expr='iexact')
    min_price = filters.NumberFilter(field_name='variants__price', lookup_expr='gte', distinct=True)
    max_price = filters.NumberFilter(field_name='variants__price', lookup_expr='lte', distinct=True)

    class Meta:
        model = Product
        fields = ['category', 'brand', 'origin', 'is_active']

    def filter_category(self, queryset, name, value):
        category = Category.objects.filter(pk=value).first()
        if category is None:
            return queryset.none()
        return queryset.filter(category_id__in=category.subtree_ids())


class ProductVariantFilter(filters.FilterSet):
    """Filter for variants by product, price range and stock."""

    product = filters.NumberFilter(field_name='product__id')
    product_slug = filters.CharFilter(field_name='product__slug')

    # Price filters
    min_price = filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = filters.NumberFilter(field_name='price', lookup_expr='lte')

    # Stock filters
    in_stock = filters.BooleanFilter(method='filter_in_stock')

    sku = filters.CharFilter(field_name='sku', lookup_expr='icontains')

    class Meta:
        model = ProductVariant
        fields = ['product', 'product_slug', 'sku']

    def filter_in_stock(self, queryset, name, value):
        if value is True:
            return queryset.filter(stock__gt=0)
        elif value is False:
            return queryset.filter(stock=0)
        return queryset
