"""
Tests for attribute group expansion
"""
from django.test import SimpleTestCase, override_settings

from apps.catalog.exceptions import CombinationLimitExceeded, DuplicateAttributeValue
from apps.catalog.services import AttributeGroup, generate_combinations
from apps.catalog.utils import combination_key, combination_label


COLOR = AttributeGroup('Màu sắc', ('Đỏ', 'Xanh'))
SIZE = AttributeGroup('Size', ('M', 'L'))


class GenerateCombinationsTests(SimpleTestCase):

    def test_two_groups_produce_every_pair(self):
        result = generate_combinations([COLOR, SIZE])
        self.assertEqual(result, [
            {'Màu sắc': 'Đỏ', 'Size': 'M'},
            {'Màu sắc': 'Đỏ', 'Size': 'L'},
            {'Màu sắc': 'Xanh', 'Size': 'M'},
            {'Màu sắc': 'Xanh', 'Size': 'L'},
        ])

    def test_count_is_product_of_group_sizes(self):
        groups = [COLOR, AttributeGroup('Size', ('S', 'M', 'L')), AttributeGroup('Điện áp', ('220V', '110V'))]
        result = generate_combinations(groups)
        self.assertEqual(len(result), 12)
        self.assertEqual(len({combination_key(c) for c in result}), 12)
        for combination in result:
            self.assertEqual(set(combination), {'Màu sắc', 'Size', 'Điện áp'})

    def test_no_groups(self):
        self.assertEqual(generate_combinations([]), [])

    def test_only_invalid_groups(self):
        groups = [AttributeGroup('', ('Đỏ',)), AttributeGroup('Size', ())]
        self.assertEqual(generate_combinations(groups), [])

    def test_invalid_groups_are_skipped(self):
        groups = [AttributeGroup('', ('X',)), COLOR, AttributeGroup('Size', ())]
        self.assertEqual(
            generate_combinations(groups),
            [{'Màu sắc': 'Đỏ'}, {'Màu sắc': 'Xanh'}]
        )

    def test_single_group(self):
        group = AttributeGroup('Công suất', ('500W', '750W', '1000W'))
        self.assertEqual(
            generate_combinations([group]),
            [{'Công suất': '500W'}, {'Công suất': '750W'}, {'Công suất': '1000W'}]
        )

    def test_repeated_value_is_used_as_given(self):
        group = AttributeGroup('Màu sắc', ('Đỏ', 'Đỏ'))
        self.assertEqual(generate_combinations([group]), [{'Màu sắc': 'Đỏ'}, {'Màu sắc': 'Đỏ'}])

    def test_limit_exceeded(self):
        groups = [
            AttributeGroup('A', tuple(str(i) for i in range(10))),
            AttributeGroup('B', tuple(str(i) for i in range(10))),
        ]
        with self.assertRaises(CombinationLimitExceeded) as ctx:
            generate_combinations(groups, limit=99)
        self.assertEqual(ctx.exception.total, 100)
        self.assertEqual(ctx.exception.limit, 99)

    def test_limit_reached_exactly(self):
        groups = [AttributeGroup('A', ('1', '2')), AttributeGroup('B', ('1', '2'))]
        self.assertEqual(len(generate_combinations(groups, limit=4)), 4)

    @override_settings(CATALOG_MAX_VARIANT_COMBINATIONS=3)
    def test_limit_from_settings(self):
        with self.assertRaises(CombinationLimitExceeded):
            generate_combinations([COLOR, SIZE])


class AttributeGroupTests(SimpleTestCase):

    def test_is_valid(self):
        self.assertTrue(COLOR.is_valid)
        self.assertFalse(AttributeGroup('Màu sắc').is_valid)
        self.assertFalse(AttributeGroup('', ('Đỏ',)).is_valid)

    def test_with_value_trims(self):
        group = AttributeGroup('Size').with_value('  XL ')
        self.assertEqual(group.values, ('XL',))

    def test_with_blank_value_is_ignored(self):
        self.assertEqual(SIZE.with_value('   '), SIZE)

    def test_with_duplicate_value_raises(self):
        with self.assertRaises(DuplicateAttributeValue):
            SIZE.with_value(' M')

    def test_without_value(self):
        self.assertEqual(COLOR.without_value('Đỏ').values, ('Xanh',))

    def test_values_list_is_stored_as_tuple(self):
        group = AttributeGroup('Size', ['M', 'L'])
        self.assertEqual(group, SIZE)


class CombinationKeyTests(SimpleTestCase):

    def test_key_ignores_insertion_order(self):
        self.assertEqual(
            combination_key({'Màu sắc': 'Đỏ', 'Size': 'M'}),
            combination_key({'Size': 'M', 'Màu sắc': 'Đỏ'})
        )

    def test_key_keeps_vietnamese_characters(self):
        self.assertEqual(combination_key({'Màu sắc': 'Đỏ'}), '{"Màu sắc":"Đỏ"}')

    def test_label(self):
        self.assertEqual(combination_label({'Màu sắc': 'Đỏ', 'Size': 'M'}), 'Đỏ / M')
        self.assertEqual(combination_label({}), '')
