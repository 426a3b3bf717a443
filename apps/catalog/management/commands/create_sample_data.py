"""
Sample catalog for local development.
Run with: python manage.py create_sample_data
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.catalog.models import Category, Product
from apps.catalog.services import AttributeGroup, VariantEditingSession, VariantPersistenceService


CATEGORIES = {
    'Dụng cụ điện': ['Máy khoan', 'Máy mài', 'Máy cắt'],
    'Thiết bị đo': ['Đồng hồ vạn năng', 'Ampe kìm'],
    'Thiết bị điện': ['Dây cáp điện', 'Ổ cắm'],
}

PRODUCTS = [
    {
        'name': 'Máy khoan pin Bosch GSB 180-LI',
        'brand': 'Bosch',
        'origin': 'Malaysia',
        'category': 'Máy khoan',
        'groups': [('Màu sắc', ['Xanh', 'Đen']), ('Pin', ['1 pin', '2 pin'])],
        'price': Decimal('1850000'),
        'sku_prefix': 'GSB180',
    },
    {
        'name': 'Máy mài góc Makita 9553NB',
        'brand': 'Makita',
        'origin': 'Trung Quốc',
        'category': 'Máy mài',
        'groups': [('Công suất', ['710W'])],
        'price': Decimal('990000'),
        'sku_prefix': 'MK9553',
    },
    {
        'name': 'Dây cáp điện Cadivi CV',
        'category': 'Dây cáp điện',
        'groups': [('Tiết diện', ['1.5mm²', '2.5mm²', '4mm²']), ('Màu sắc', ['Đỏ', 'Xanh', 'Vàng'])],
        'price': Decimal('8500'),
        'sku_prefix': 'CV',
    },
]


class Command(BaseCommand):
    help = 'Tạo danh mục và sản phẩm mẫu có biến thể'

    @transaction.atomic
    def handle(self, *args, **options):
        categories = self._create_categories()

        for item in PRODUCTS:
            product, created = Product.objects.get_or_create(
                name=item['name'],
                defaults={
                    'brand': item.get('brand', 'NoBrand'),
                    'origin': item.get('origin', 'Việt Nam'),
                    'category': categories[item['category']],
                }
            )
            if not created:
                self.stdout.write(f'  - {product.name}: đã tồn tại')
                continue

            session = VariantEditingSession(
                groups=[AttributeGroup(name, tuple(values)) for name, values in item['groups']]
            ).regenerate()
            for index, variant in enumerate(session.variants, 1):
                session = session.update_variant(
                    variant.attributes,
                    price=item['price'],
                    stock=10,
                    sku=f"{item['sku_prefix']}-{index:02d}",
                )

            result = VariantPersistenceService().save(product, session.variants)
            self.stdout.write(f'  - {product.name}: {result.inserted} biến thể')

        self.stdout.write(self.style.SUCCESS(
            f'Đã tạo dữ liệu mẫu: {Category.objects.count()} danh mục, '
            f'{Product.objects.count()} sản phẩm'
        ))

    def _create_categories(self):
        categories = {}
        for order, (root_name, children) in enumerate(CATEGORIES.items()):
            root, _ = Category.objects.get_or_create(
                name=root_name, parent=None, defaults={'display_order': order}
            )
            categories[root_name] = root
            for child_order, child_name in enumerate(children):
                child, _ = Category.objects.get_or_create(
                    name=child_name, parent=root, defaults={'display_order': child_order}
                )
                categories[child_name] = child
        return categories
