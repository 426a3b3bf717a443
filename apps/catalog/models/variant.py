from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from simple_history.models import HistoricalRecords

from apps.catalog.utils import combination_key, combination_label


class ProductVariant(models.Model):
    """
    One attribute combination of a product, e.g. {"Màu sắc": "Đỏ", "Size": "M"},
    with its own price, stock and SKU.

    ``attributes_key`` is the canonical form of ``attributes`` and is kept in
    sync on save; a product cannot hold the same combination twice.
    """
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='variants',
        verbose_name='Sản phẩm'
    )
    attributes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Thuộc tính'
    )
    attributes_key = models.CharField(
        max_length=1000,
        editable=False,
        verbose_name='Khóa thuộc tính'
    )
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name='Giá'
    )
    stock = models.PositiveIntegerField(
        default=0,
        verbose_name='Tồn kho'
    )
    sku = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='SKU'
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
        ordering = ['product', 'created_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'attributes_key'],
                name='unique_variant_combination_per_product'
            ),
        ]
        verbose_name = 'Biến thể'
        verbose_name_plural = 'Biến thể'

    def __str__(self):
        label = self.label
        if label:
            return f"{self.product.name} - {label}"
        return self.product.name

    def clean(self):
        # attributes_key is not a form field, so the unique constraint is not checked by forms
        if not self.product_id:
            return
        taken = ProductVariant.objects.filter(
            product_id=self.product_id,
            attributes_key=combination_key(self.attributes)
        ).exclude(pk=self.pk)
        if taken.exists():
            raise ValidationError(
                f'Sản phẩm đã có biến thể "{combination_label(self.attributes)}".'
            )

    def save(self, *args, **kwargs):
        self.attributes_key = combination_key(self.attributes)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'attributes' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'attributes_key'}
        super().save(*args, **kwargs)

    @property
    def label(self):
        return combination_label(self.attributes)

    @property
    def is_in_stock(self):
        return self.stock > 0

    def to_draft(self):
        from apps.catalog.services.variant_combinations import VariantDraft
        return VariantDraft(
            attributes=dict(self.attributes or {}),
            price=self.price,
            stock=self.stock,
            sku=self.sku or '',
            id=self.pk,
        )
