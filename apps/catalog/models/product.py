from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from simple_history.models import HistoricalRecords
from imagekit.models import ProcessedImageField, ImageSpecField
from imagekit.processors import ResizeToFill, ResizeToFit

from apps.catalog.utils import unique_slug

MAX_GALLERY_IMAGES = 5


class Product(models.Model):
    """
    Catalog entry, e.g. "Máy khoan Bosch GSB 550".
    A product sells through its variants; a product without variants has
    nothing to put in the cart.
    """
    name = models.CharField(
        max_length=255,
        validators=[MinLengthValidator(5)],
        verbose_name='Tên sản phẩm'
    )
    slug = models.SlugField(
        max_length=255,
        unique=True,
        blank=True,
        verbose_name='Slug'
    )
    description = models.TextField(
        max_length=5000,
        blank=True,
        verbose_name='Mô tả'
    )
    brand = models.CharField(
        max_length=100,
        default='NoBrand',
        verbose_name='Thương hiệu'
    )
    origin = models.CharField(
        max_length=100,
        default='Việt Nam',
        verbose_name='Xuất xứ'
    )
    warranty_months = models.PositiveIntegerField(
        default=12,
        verbose_name='Bảo hành (tháng)'
    )
    category = models.ForeignKey(
        'catalog.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name='Danh mục'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Hoạt động'
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Ngày tạo'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Ngày cập nhật'
    )

    # History tracking
    history = HistoricalRecords()

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Sản phẩm'
        verbose_name_plural = 'Sản phẩm'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Product, self.name, instance_pk=self.pk, fallback='san-pham')
        super().save(*args, **kwargs)

    @property
    def variant_count(self):
        return self.variants.count()

    @property
    def min_price(self):
        return self.variants.aggregate(value=models.Min('price'))['value']

    @property
    def max_price(self):
        return self.variants.aggregate(value=models.Max('price'))['value']

    @property
    def price_range(self):
        min_p, max_p = self.min_price, self.max_price
        if min_p is None:
            return None
        if min_p == max_p:
            return f"{min_p:,.0f} đ"
        return f"{min_p:,.0f} đ - {max_p:,.0f} đ"

    @property
    def total_stock(self):
        return self.variants.aggregate(total=models.Sum('stock'))['total'] or 0

    @property
    def thumbnail(self):
        return self.images.filter(is_primary=True).first() or self.images.first()

    def get_variant_drafts(self):
        """Stored variants as editable rows, oldest first."""
        return [variant.to_draft() for variant in self.variants.order_by('created_at', 'id')]

    def get_attribute_groups(self):
        """Attribute groups reconstructed from the stored variants."""
        from apps.catalog.services.variant_combinations import derive_attribute_groups
        return derive_attribute_groups(
            self.variants.order_by('created_at', 'id').values_list('attributes', flat=True)
        )


class ProductImage(models.Model):
    """Gallery image for a product; the primary one is the thumbnail."""
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='images',
        verbose_name='Sản phẩm'
    )
    image = ProcessedImageField(
        upload_to='products/%Y/%m/',
        processors=[ResizeToFit(1200, 1200)],
        format='JPEG',
        options={'quality': 85},
        verbose_name='Hình ảnh'
    )
    thumbnail = ImageSpecField(
        source='image',
        processors=[ResizeToFill(300, 300)],
        format='JPEG',
        options={'quality': 70}
    )
    alt_text = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Văn bản thay thế'
    )
    display_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Thứ tự hiển thị'
    )
    is_primary = models.BooleanField(
        default=False,
        verbose_name='Ảnh bìa'
    )

    class Meta:
        ordering = ['display_order', 'id']
        verbose_name = 'Hình ảnh sản phẩm'
        verbose_name_plural = 'Hình ảnh sản phẩm'

    def __str__(self):
        return f"{self.product.name} - Ảnh {self.display_order}"

    def clean(self):
        siblings = ProductImage.objects.filter(product_id=self.product_id).exclude(pk=self.pk)
        if siblings.count() >= MAX_GALLERY_IMAGES:
            raise ValidationError(f"Tối đa {MAX_GALLERY_IMAGES} ảnh cho mỗi sản phẩm.")

    def save(self, *args, **kwargs):
        # Ensure only one primary image per product
        if self.is_primary:
            ProductImage.objects.filter(
                product=self.product,
                is_primary=True
            ).exclude(pk=self.pk).update(is_primary=False)

        if not self.alt_text:
            self.alt_text = self.product.name

        super().save(*args, **kwargs)
