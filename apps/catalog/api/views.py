import logging

from django.db import DatabaseError
from django.db.models import Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from apps.catalog.exceptions import VariantError
from apps.catalog.models import (
    Category,
    Product,
    ProductVariant,
    PriceHistory,
)
from apps.catalog.services import VariantEditingSession
from .filters import ProductFilter, ProductVariantFilter
from .permissions import IsStaffOrReadOnly
from .serializers import (
    CategorySerializer,
    ProductSerializer,
    ProductListSerializer,
    ProductDetailSerializer,
    ProductVariantSerializer,
    VariantEditingSessionSerializer,
    RemoveVariantSerializer,
    AddValueSerializer,
    PriceHistorySerializer,
)

logger = logging.getLogger(__name__)


def _error_response(error, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'error': str(error)}, status=status_code)


class CategoryViewSet(viewsets.ModelViewSet):
    """
    API endpoint for product categories.
    """
    queryset = Category.objects.select_related('parent')
    serializer_class = CategorySerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['parent', 'is_active']
    search_fields = ['name']
    ordering = ['display_order', 'name']


class ProductViewSet(viewsets.ModelViewSet):
    """
    API endpoint for products.

    list: List products (active only for non-staff)
    retrieve: Get product detail with variants
    create: Create a product together with its variant table
    update: Update a product; a submitted variant table replaces the stored one
    delete: Delete a product
    """
    queryset = Product.objects.select_related('category')
    permission_classes = [IsStaffOrReadOnly]
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'brand', 'description']
    ordering_fields = ['name', 'created_at']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductListSerializer
        elif self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_staff:
            queryset = queryset.filter(is_active=True)
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related(
                'images',
                Prefetch('variants', queryset=ProductVariant.objects.order_by('created_at', 'id')),
            )
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._save(serializer, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        return self._save(serializer, status.HTTP_200_OK)

    def _save(self, serializer, success_status):
        try:
            product = serializer.save()
        except VariantError as e:
            return _error_response(e)
        except DatabaseError:
            logger.exception("Saving product failed")
            return _error_response(
                'Lưu sản phẩm thất bại, không có thay đổi nào được ghi.',
                status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        data = ProductDetailSerializer(product, context=self.get_serializer_context()).data
        result = serializer.variant_result
        data['variant_changes'] = result.as_dict() if result else None
        data['warnings'] = list(result.warnings) if result else []
        return Response(data, status=success_status)

    @action(detail=True, methods=['get'], url_path='variant-editor', permission_classes=[IsAdminUser])
    def variant_editor(self, request, pk=None):
        """Variant table of a stored product, ready for editing."""
        product = self.get_object()
        try:
            session = VariantEditingSession.from_variants(product.get_variant_drafts())
        except VariantError as e:
            return _error_response(e)
        return Response(VariantEditingSessionSerializer(session).data)


class ProductVariantViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for variants (read-only, changed through products).
    """
    queryset = ProductVariant.objects.select_related('product')
    serializer_class = ProductVariantSerializer
    filterset_class = ProductVariantFilter
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['sku', 'product__name']
    ordering_fields = ['price', 'stock', 'created_at']
    ordering = ['product', 'created_at', 'id']

    @action(detail=True, methods=['get'], permission_classes=[IsAdminUser])
    def price_history(self, request, pk=None):
        """Get price history for a variant."""
        variant = self.get_object()
        history = PriceHistory.objects.filter(variant=variant).select_related('changed_by')
        serializer = PriceHistorySerializer(history, many=True)
        return Response(serializer.data)


class VariantEditorViewSet(viewsets.ViewSet):
    """
    Variant table editing for the admin product form.

    Stateless: the form posts its current session and gets the next one back.

    list: Empty session for a new product
    regenerate: Rebuild rows after group/value edits
    remove_variant: Remove one row and keep it out of later regenerations
    add_value: Append a value to a group, rejecting duplicates
    """
    permission_classes = [IsAdminUser]

    def list(self, request):
        session = VariantEditingSession.for_create()
        return Response(VariantEditingSessionSerializer(session).data)

    def _respond(self, serializer_class, request, operation):
        serializer = serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            session = operation(serializer.to_session(), serializer.validated_data)
        except VariantError as e:
            return _error_response(e)
        return Response(VariantEditingSessionSerializer(session).data)

    @action(detail=False, methods=['post'])
    def regenerate(self, request):
        return self._respond(
            VariantEditingSessionSerializer, request,
            lambda session, data: session.regenerate()
        )

    @action(detail=False, methods=['post'], url_path='remove-variant')
    def remove_variant(self, request):
        return self._respond(
            RemoveVariantSerializer, request,
            lambda session, data: session.remove_variant(data['attributes'])
        )

    @action(detail=False, methods=['post'], url_path='add-value')
    def add_value(self, request):
        return self._respond(
            AddValueSerializer, request,
            lambda session, data: session.add_value(data['group_index'], data['value'])
        )


class PriceHistoryViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for price history (read-only).
    """
    queryset = PriceHistory.objects.select_related('variant__product', 'changed_by')
    serializer_class = PriceHistorySerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['variant']
    ordering = ['-changed_at']
