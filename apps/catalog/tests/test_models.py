"""
Model and admin validation tests: category levels, variant combinations
and the gallery size
"""
from django.core.exceptions import ValidationError
from django.forms import inlineformset_factory
from django.test import TestCase

from apps.catalog.admin import ProductImageFormSet, ProductVariantAdmin
from apps.catalog.models import Category, Product, ProductImage, ProductVariant
from .factories import TestDataFactory


class CategoryTests(TestCase):

    def setUp(self):
        self.tools = TestDataFactory.create_category(name='Dụng cụ điện')
        self.drills = TestDataFactory.create_category(name='Máy khoan', parent=self.tools)

    def test_levels_and_path(self):
        self.assertEqual((self.tools.level, self.tools.full_path), (0, 'Dụng cụ điện'))
        self.assertEqual((self.drills.level, self.drills.full_path), (1, 'Dụng cụ điện > Máy khoan'))
        self.assertEqual(sorted(self.tools.subtree_ids()), sorted([self.tools.pk, self.drills.pk]))

    def test_clean_rejects_child_as_parent(self):
        self.tools.parent = self.drills
        with self.assertRaises(ValidationError) as ctx:
            self.tools.clean()
        self.assertIn('parent', ctx.exception.message_dict)

    def test_clean_rejects_itself_as_parent(self):
        self.tools.parent = self.tools
        with self.assertRaises(ValidationError):
            self.tools.clean()

    def test_new_category_under_sub_category(self):
        bits = Category(name='Mũi khoan', parent=self.drills)
        self.assertEqual(bits.parent_error(self.drills), 'Chỉ danh mục gốc mới có thể làm danh mục cha.')

    def test_parent_limited_to_roots(self):
        field = Category._meta.get_field('parent')
        self.assertEqual(field.get_limit_choices_to(), {'parent__isnull': True})


class ProductVariantCleanTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(name='Máy khoan Bosch GSB 550')
        self.red_m = TestDataFactory.create_variant(self.product, {'Màu sắc': 'Đỏ', 'Size': 'M'})

    def test_duplicate_combination(self):
        # Same pairs in another order
        duplicate = ProductVariant(product=self.product, attributes={'Size': 'M', 'Màu sắc': 'Đỏ'})
        with self.assertRaises(ValidationError) as ctx:
            duplicate.clean()
        self.assertIn('Đỏ', ctx.exception.messages[0])

    def test_same_combination_on_another_product(self):
        other = TestDataFactory.create_product(name='Máy khoan Makita HP1630')
        ProductVariant(product=other, attributes={'Màu sắc': 'Đỏ', 'Size': 'M'}).clean()

    def test_editing_the_row_itself(self):
        self.red_m.sku = 'GSB-D-M'
        self.red_m.full_clean()

    def test_admin_does_not_edit_combinations(self):
        self.assertIn('attributes', ProductVariantAdmin.readonly_fields)


class ProductImageFormSetTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(name='Máy khoan Bosch GSB 550')
        self.FormSet = inlineformset_factory(
            Product, ProductImage, formset=ProductImageFormSet, fields=['alt_text'], extra=0
        )

    def formset_data(self, count, deleted=()):
        data = {
            'images-TOTAL_FORMS': str(count),
            'images-INITIAL_FORMS': '0',
            'images-MIN_NUM_FORMS': '0',
            'images-MAX_NUM_FORMS': '1000',
        }
        for index in range(count):
            data[f'images-{index}-alt_text'] = f'Ảnh {index + 1}'
            if index in deleted:
                data[f'images-{index}-DELETE'] = 'on'
        return data

    def make_formset(self, data):
        return self.FormSet(data=data, instance=self.product, prefix='images')

    def test_too_many_images_in_one_submit(self):
        formset = self.make_formset(self.formset_data(6))
        self.assertFalse(formset.is_valid())
        self.assertIn('Tối đa 5 ảnh cho mỗi sản phẩm.', formset.non_form_errors())

    def test_five_images(self):
        self.assertTrue(self.make_formset(self.formset_data(5)).is_valid())

    def test_deleted_rows_do_not_count(self):
        self.assertTrue(self.make_formset(self.formset_data(6, deleted=[0])).is_valid())
