from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string


class Order(models.Model):
    """Customer order placed from the storefront checkout."""
    STATUS_CHOICES = [
        ('pending', 'Chờ xác nhận'),
        ('confirmed', 'Đã xác nhận'),
        ('shipping', 'Đang giao'),
        ('completed', 'Hoàn thành'),
        ('cancelled', 'Đã hủy'),
    ]

    code = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        verbose_name='Mã đơn hàng'
    )
    customer_name = models.CharField(
        max_length=255,
        verbose_name='Khách hàng'
    )
    customer_phone = models.CharField(
        max_length=20,
        verbose_name='Số điện thoại'
    )
    shipping_address = models.TextField(
        verbose_name='Địa chỉ giao hàng'
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='pending',
        verbose_name='Trạng thái'
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name='Tổng tiền'
    )
    notes = models.TextField(
        blank=True,
        verbose_name='Ghi chú'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Ngày đặt'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Ngày cập nhật'
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Đơn hàng'
        verbose_name_plural = 'Đơn hàng'

    def __str__(self):
        return f"#{self.code} - {self.customer_name}"

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = self._generate_code()
        super().save(*args, **kwargs)

    @staticmethod
    def _generate_code():
        stamp = timezone.now().strftime('%y%m%d')
        return f"DH{stamp}{get_random_string(6, '0123456789ABCDEFGHJKLMNPQRSTUVWXYZ')}"

    def recalculate_total(self):
        total = sum((item.subtotal for item in self.items.all()), Decimal('0'))
        self.total_amount = total
        self.save(update_fields=['total_amount', 'updated_at'])
        return total


class OrderItem(models.Model):
    """
    Line item of an order. Points at the exact variant that was bought, so
    that variant must outlive any edit of the product's attribute groups.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name='Đơn hàng'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='order_items',
        verbose_name='Sản phẩm'
    )
    variant = models.ForeignKey(
        'catalog.ProductVariant',
        on_delete=models.PROTECT,
        related_name='order_items',
        verbose_name='Biến thể'
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name='Số lượng'
    )
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name='Đơn giá'
    )

    class Meta:
        ordering = ['id']
        verbose_name = 'Sản phẩm trong đơn'
        verbose_name_plural = 'Sản phẩm trong đơn'

    def __str__(self):
        return f"{self.order.code} - {self.variant} x{self.quantity}"

    @property
    def subtotal(self):
        return self.price * self.quantity
