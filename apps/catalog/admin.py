from django.contrib import admin
from django.core.exceptions import ValidationError
from django.utils.html import format_html
from import_export import resources, fields
from import_export.admin import ImportExportModelAdmin
from import_export.widgets import ForeignKeyWidget, JSONWidget
from adminsortable2.admin import CustomInlineFormSet, SortableAdminMixin, SortableAdminBase, SortableInlineAdminMixin
from simple_history.admin import SimpleHistoryAdmin

from .models.product import MAX_GALLERY_IMAGES
from .models import (
    Category,
    Product,
    ProductImage,
    ProductVariant,
    PriceHistory,
)


# =============================================================================
# Import/Export Resources
# =============================================================================

class ProductVariantResource(resources.ModelResource):
    """Resource for importing/exporting variants."""

    product_name = fields.Field(
        column_name='product_name',
        attribute='product',
        widget=ForeignKeyWidget(Product, 'name')
    )
    attributes = fields.Field(
        column_name='attributes',
        attribute='attributes',
        widget=JSONWidget()
    )

    class Meta:
        model = ProductVariant
        fields = ('id', 'product_name', 'attributes', 'sku', 'price', 'stock')
        export_order = fields


# =============================================================================
# Inlines
# =============================================================================

class ProductImageFormSet(CustomInlineFormSet):
    """Counts the whole submitted gallery, not only the rows already saved."""

    def clean(self):
        super().clean()
        kept = [
            form for form in self.forms
            if getattr(form, 'cleaned_data', None) and not form.cleaned_data.get('DELETE')
        ]
        if len(kept) > MAX_GALLERY_IMAGES:
            raise ValidationError(f"Tối đa {MAX_GALLERY_IMAGES} ảnh cho mỗi sản phẩm.")


class ProductImageInline(SortableInlineAdminMixin, admin.TabularInline):
    model = ProductImage
    formset = ProductImageFormSet
    extra = 1
    fields = ['image', 'alt_text', 'is_primary', 'display_order', 'image_preview']
    readonly_fields = ['image_preview']

    def image_preview(self, obj):
        if obj.image:
            return format_html(
                '<img src="{}" style="max-height: 50px; max-width: 100px;" />',
                obj.thumbnail.url
            )
        return '-'
    image_preview.short_description = 'Xem trước'


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ['label', 'sku', 'price', 'stock']
    readonly_fields = ['label', 'sku', 'price', 'stock']
    show_change_link = True
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def label(self, obj):
        return obj.label or '-'
    label.short_description = 'Phân loại'


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Category)
class CategoryAdmin(SortableAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'full_path', 'product_count', 'is_active', 'display_order']
    list_filter = ['is_active', 'parent']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['parent']
    list_select_related = ['parent']

    def product_count(self, obj):
        return obj.products.count()
    product_count.short_description = 'Sản phẩm'


@admin.register(Product)
class ProductAdmin(SortableAdminBase, SimpleHistoryAdmin):
    list_display = ['name', 'brand', 'category', 'variant_count', 'price_range', 'total_stock', 'is_active', 'created_at']
    list_filter = ['is_active', 'brand', 'category', 'created_at']
    search_fields = ['name', 'slug', 'brand', 'description']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['category']
    readonly_fields = ['variant_count', 'price_range', 'total_stock', 'created_at', 'updated_at']
    inlines = [ProductImageInline, ProductVariantInline]

    fieldsets = (
        (None, {
            'fields': ('name', 'slug', 'category', 'description', 'is_active')
        }),
        ('Thông tin', {
            'fields': ('brand', 'origin', 'warranty_months')
        }),
        ('Tổng quan', {
            'fields': ('variant_count', 'price_range', 'total_stock', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['activate_products', 'deactivate_products']

    @admin.action(description='Hiển thị sản phẩm đã chọn')
    def activate_products(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Đã hiển thị {count} sản phẩm.')

    @admin.action(description='Ẩn sản phẩm đã chọn')
    def deactivate_products(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'Đã ẩn {count} sản phẩm.')


@admin.register(ProductVariant)
class ProductVariantAdmin(ImportExportModelAdmin, SimpleHistoryAdmin):
    resource_class = ProductVariantResource
    list_display = ['__str__', 'sku', 'price', 'stock', 'stock_status', 'order_item_count']
    list_filter = ['product']
    list_editable = ['price', 'stock']
    search_fields = ['sku', 'product__name']
    autocomplete_fields = ['product']
    # Combinations change through the product's variant table
    readonly_fields = ['attributes', 'attributes_key', 'created_at', 'updated_at']
    list_per_page = 50

    def stock_status(self, obj):
        if obj.stock <= 0:
            return format_html('<span style="color: red;">Hết hàng</span>')
        return format_html('<span style="color: green;">Còn hàng</span>')
    stock_status.short_description = 'Tình trạng'

    def order_item_count(self, obj):
        return obj.order_items.count()
    order_item_count.short_description = 'Đơn hàng'

    def has_delete_permission(self, request, obj=None):
        # Variants referenced by orders are protected at the database level
        if obj is not None and obj.order_items.exists():
            return False
        return super().has_delete_permission(request, obj)


@admin.register(PriceHistory)
class PriceHistoryAdmin(admin.ModelAdmin):
    list_display = [
        'variant', 'old_price', 'new_price',
        'price_diff_display', 'changed_by', 'changed_at'
    ]
    list_filter = ['changed_at', 'variant__product']
    search_fields = ['variant__sku', 'variant__product__name']
    readonly_fields = [
        'variant', 'old_price', 'new_price',
        'changed_by', 'changed_at', 'price_difference', 'percentage_change'
    ]
    date_hierarchy = 'changed_at'

    def price_diff_display(self, obj):
        diff = obj.price_difference
        if diff is None:
            return '-'
        formatted = f'{diff:,.0f} đ'
        if diff > 0:
            return format_html('<span style="color: green;">+{}</span>', formatted)
        elif diff < 0:
            return format_html('<span style="color: red;">{}</span>', formatted)
        return '0 đ'
    price_diff_display.short_description = 'Chênh lệch'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# Admin Site Configuration
# =============================================================================

admin.site.site_header = 'TLECTRIC Admin'
admin.site.site_title = 'TLECTRIC'
admin.site.index_title = 'Trang quản trị'
