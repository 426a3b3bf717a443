"""
Test utilities and factories for creating catalog test data
"""
import random
import string
from decimal import Decimal

from django.contrib.auth import get_user_model

from apps.catalog.models import Category, Product, ProductVariant
from apps.orders.models import Order, OrderItem

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""
    __test__ = False

    @staticmethod
    def random_string(length=6):
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(username=None, password='testpass123', is_staff=False, is_superuser=False):
        if not username:
            username = f'user_{TestDataFactory.random_string()}'
        return User.objects.create_user(
            username=username,
            email=f'{username}@test.com',
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_staff(username=None):
        return TestDataFactory.create_user(username=username, is_staff=True)

    @staticmethod
    def create_category(name=None, parent=None):
        if not name:
            name = f'Danh mục {TestDataFactory.random_string()}'
        return Category.objects.create(name=name, parent=parent)

    @staticmethod
    def create_product(name=None, category=None, **kwargs):
        if not name:
            name = f'Máy khoan {TestDataFactory.random_string()}'
        return Product.objects.create(name=name, category=category, **kwargs)

    @staticmethod
    def create_variant(product, attributes, price='0', stock=0, sku=''):
        return ProductVariant.objects.create(
            product=product,
            attributes=attributes,
            price=Decimal(price),
            stock=stock,
            sku=sku
        )

    @staticmethod
    def create_order(customer_name='Nguyễn Văn A'):
        return Order.objects.create(
            customer_name=customer_name,
            customer_phone='0901234567',
            shipping_address='12 Lê Lợi, Quận 1, TP.HCM'
        )

    @staticmethod
    def create_order_item(variant, quantity=1, order=None):
        order = order or TestDataFactory.create_order()
        return OrderItem.objects.create(
            order=order,
            product=variant.product,
            variant=variant,
            quantity=quantity,
            price=variant.price
        )
