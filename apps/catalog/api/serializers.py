from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from apps.catalog.models import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
    PriceHistory,
)
from apps.catalog.services import (
    AttributeGroup,
    VariantDraft,
    VariantEditingSession,
    VariantPersistenceService,
)
from apps.catalog.services.variant_persistence import find_duplicate_combinations


# =============================================================================
# Category Serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):
    full_path = serializers.CharField(read_only=True)
    level = serializers.IntegerField(read_only=True)

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'parent', 'full_path', 'level',
            'description', 'is_active', 'display_order'
        ]
        extra_kwargs = {'slug': {'required': False}}

    def validate_parent(self, value):
        category = self.instance or Category()
        error = category.parent_error(value)
        if error:
            raise serializers.ValidationError(error)
        return value


# =============================================================================
# Image Serializer
# =============================================================================

class ProductImageSerializer(serializers.ModelSerializer):
    thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = ProductImage
        fields = ['id', 'image', 'thumbnail_url', 'alt_text', 'display_order', 'is_primary']

    def get_thumbnail_url(self, obj):
        if not obj.image:
            return None
        request = self.context.get('request')
        url = obj.thumbnail.url
        if request:
            return request.build_absolute_uri(url)
        return url


# =============================================================================
# Variant Serializers
# =============================================================================

class ProductVariantSerializer(serializers.ModelSerializer):
    """Stored variant, read-only listing."""
    product_name = serializers.CharField(source='product.name', read_only=True)
    label = serializers.CharField(read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = ProductVariant
        fields = [
            'id', 'product', 'product_name', 'attributes', 'label',
            'price', 'stock', 'sku', 'is_in_stock', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class VariantDraftSerializer(serializers.Serializer):
    """One row of the variant table in the product form."""
    id = serializers.IntegerField(required=False, allow_null=True)
    attributes = serializers.DictField(child=serializers.CharField())
    price = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0'), default=Decimal('0')
    )
    stock = serializers.IntegerField(min_value=0, default=0)
    sku = serializers.CharField(max_length=100, allow_blank=True, default='')
    label = serializers.CharField(read_only=True)

    @staticmethod
    def to_draft(data):
        return VariantDraft(
            attributes=dict(data.get('attributes') or {}),
            price=data.get('price', Decimal('0')),
            stock=data.get('stock', 0),
            sku=data.get('sku', ''),
            id=data.get('id'),
        )


class AttributeGroupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, allow_blank=True)
    values = serializers.ListField(
        child=serializers.CharField(max_length=100), default=list
    )


class VariantEditingSessionSerializer(serializers.Serializer):
    """
    Payload exchanged with the product form:

    {
        "groups": [{"name": "Màu sắc", "values": ["Đỏ", "Xanh"]}],
        "variants": [{"attributes": {"Màu sắc": "Đỏ"}, "price": "100000", ...}],
        "deleted_combinations": ["{\"Màu sắc\":\"Xanh\"}"]
    }
    """
    groups = AttributeGroupSerializer(many=True, required=False)
    variants = VariantDraftSerializer(many=True, required=False)
    deleted_combinations = serializers.ListField(
        child=serializers.CharField(), required=False
    )

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['deleted_combinations'] = sorted(data.get('deleted_combinations') or [])
        return data

    def to_session(self):
        data = self.validated_data
        return VariantEditingSession(
            groups=[
                AttributeGroup(group['name'], tuple(group.get('values') or ()))
                for group in data.get('groups', [])
            ],
            variants=[VariantDraftSerializer.to_draft(row) for row in data.get('variants', [])],
            deleted_combinations=data.get('deleted_combinations', []),
        )


class RemoveVariantSerializer(VariantEditingSessionSerializer):
    attributes = serializers.DictField(child=serializers.CharField())


class AddValueSerializer(VariantEditingSessionSerializer):
    group_index = serializers.IntegerField(min_value=0)
    value = serializers.CharField(max_length=100)

    def validate(self, attrs):
        if attrs['group_index'] >= len(attrs.get('groups', [])):
            raise serializers.ValidationError({'group_index': 'Nhóm phân loại không tồn tại.'})
        return attrs


# =============================================================================
# Product Serializers
# =============================================================================

class ProductSerializer(serializers.ModelSerializer):
    """
    Create/update serializer. ``variants`` is the full variant table from
    the product form; omitting it leaves stored variants untouched.
    """
    variants = VariantDraftSerializer(many=True, required=False, write_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'description', 'brand', 'origin',
            'warranty_months', 'category', 'is_active', 'variants',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'slug': {'required': False}}

    variant_result = None

    def validate_variants(self, value):
        drafts = [VariantDraftSerializer.to_draft(row) for row in value]
        duplicates = find_duplicate_combinations(drafts)
        if duplicates:
            raise serializers.ValidationError(
                f"Biến thể bị trùng: {', '.join(duplicates)}"
            )
        return value

    @transaction.atomic
    def create(self, validated_data):
        rows = validated_data.pop('variants', None)
        product = super().create(validated_data)
        self._save_variants(product, rows)
        return product

    @transaction.atomic
    def update(self, instance, validated_data):
        rows = validated_data.pop('variants', None)
        product = super().update(instance, validated_data)
        self._save_variants(product, rows)
        return product

    def _save_variants(self, product, rows):
        if rows is None:
            return
        drafts = [VariantDraftSerializer.to_draft(row) for row in rows]
        self.variant_result = VariantPersistenceService().save(product, drafts)


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for product lists."""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    variant_count = serializers.IntegerField(read_only=True)
    price_range = serializers.CharField(read_only=True)
    total_stock = serializers.IntegerField(read_only=True)
    thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'brand', 'origin', 'warranty_months',
            'category', 'category_name', 'is_active', 'variant_count',
            'price_range', 'total_stock', 'thumbnail_url'
        ]

    def get_thumbnail_url(self, obj):
        image = obj.thumbnail
        if not image:
            return None
        request = self.context.get('request')
        if request:
            return request.build_absolute_uri(image.thumbnail.url)
        return image.thumbnail.url


class ProductDetailSerializer(ProductListSerializer):
    """Product with its gallery, variants and attribute groups."""
    images = ProductImageSerializer(many=True, read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)
    attribute_groups = serializers.SerializerMethodField()
    category_path = serializers.CharField(source='category.full_path', read_only=True, default=None)

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'category_path', 'images', 'variants',
            'attribute_groups', 'created_at', 'updated_at'
        ]

    def get_attribute_groups(self, obj):
        return [group.to_dict() for group in obj.get_attribute_groups()]


# =============================================================================
# Price History Serializer
# =============================================================================

class PriceHistorySerializer(serializers.ModelSerializer):
    variant_label = serializers.CharField(source='variant.label', read_only=True)
    changed_by_name = serializers.CharField(
        source='changed_by.get_full_name', read_only=True, default=None
    )
    price_difference = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = PriceHistory
        fields = [
            'id', 'variant', 'variant_label', 'old_price', 'new_price',
            'price_difference', 'changed_by', 'changed_by_name',
            'changed_at', 'notes'
        ]
