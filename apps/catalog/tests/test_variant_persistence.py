"""
Tests for saving an edited variant table: diff planning, the order
reference guard and the database round trip
"""
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.test import SimpleTestCase, TestCase

from apps.catalog.exceptions import DuplicateVariantCombination
from apps.catalog.models import PriceHistory, Product, ProductVariant
from apps.catalog.services import (
    StoredVariant,
    VariantDraft,
    VariantPersistenceService,
    VariantRepository,
    match_stored_variants,
    plan_persistence_diff,
)
from .factories import TestDataFactory


RED_M = {'Màu sắc': 'Đỏ', 'Size': 'M'}
RED_L = {'Màu sắc': 'Đỏ', 'Size': 'L'}
BLUE_M = {'Màu sắc': 'Xanh', 'Size': 'M'}


class PlanPersistenceDiffTests(SimpleTestCase):

    def test_matched_new_and_missing_rows(self):
        client = [VariantDraft(RED_M, price=Decimal('10')), VariantDraft(BLUE_M)]
        server = [StoredVariant(1, RED_M), StoredVariant(2, RED_L)]

        plan = plan_persistence_diff(client, server, referenced_ids=set())

        self.assertEqual(plan.to_update, [(1, client[0])])
        self.assertEqual(plan.to_insert, [client[1]])
        self.assertEqual(plan.to_delete, [2])
        self.assertEqual(plan.to_retain_with_warning, [])
        self.assertIsNone(plan.retention_warning())

    def test_referenced_row_is_never_deleted(self):
        server = [StoredVariant(1, RED_M), StoredVariant(2, RED_L), StoredVariant(3, BLUE_M)]

        plan = plan_persistence_diff([VariantDraft(RED_M)], server, referenced_ids={2, 1})

        self.assertEqual(plan.to_delete, [3])
        self.assertEqual(plan.to_retain_with_warning, [StoredVariant(2, RED_L)])
        self.assertIn('Đỏ / L', plan.retention_warning())

    def test_match_ignores_key_order(self):
        client = [VariantDraft({'Size': 'M', 'Màu sắc': 'Đỏ'})]
        plan = plan_persistence_diff(client, [StoredVariant(5, RED_M)], referenced_ids=())
        self.assertEqual([pk for pk, _ in plan.to_update], [5])
        self.assertEqual(plan.to_insert, [])

    def test_empty_client_table(self):
        server = [StoredVariant(1, RED_M), StoredVariant(2, RED_L)]
        plan = plan_persistence_diff([], server, referenced_ids=[2])
        self.assertEqual(plan.to_delete, [1])
        self.assertEqual([row.id for row in plan.to_retain_with_warning], [2])

    def test_server_duplicates_resolve_first_match(self):
        server = [StoredVariant(1, RED_M), StoredVariant(2, RED_M)]

        with self.assertLogs('apps.catalog.services.variant_persistence', level='WARNING'):
            match = match_stored_variants([VariantDraft(RED_M)], server)

        self.assertEqual(match.matched[0][1].id, 1)
        self.assertEqual(match.unmatched_server, [StoredVariant(2, RED_M)])


class RecordingRepository(VariantRepository):
    """In-memory repository that records the order of calls."""

    def __init__(self, stored, referenced):
        self.stored = list(stored)
        self.referenced = set(referenced)
        self.calls = []

    def fetch_variants(self, product):
        self.calls.append('fetch')
        return list(self.stored)

    def fetch_order_item_variant_refs(self, variant_ids):
        variant_ids = list(variant_ids)
        self.calls.append(('refs', sorted(variant_ids)))
        return self.referenced & set(variant_ids)

    def update_variant(self, variant_id, fields):
        self.calls.append(('update', variant_id))

    def insert_variants(self, product, rows):
        self.calls.append(('insert', len(rows)))
        return []

    def delete_variants(self, variant_ids):
        self.calls.append(('delete', sorted(variant_ids)))
        return len(variant_ids)


class VariantPersistenceServiceUnitTests(TestCase):

    def test_delete_runs_after_reference_check(self):
        repository = RecordingRepository(
            stored=[StoredVariant(1, RED_M), StoredVariant(2, RED_L), StoredVariant(3, BLUE_M)],
            referenced={3},
        )
        result = VariantPersistenceService(repository).save(
            Product(name='Máy khoan thử'),
            [VariantDraft(RED_M), VariantDraft({'Màu sắc': 'Vàng', 'Size': 'M'})]
        )

        self.assertEqual(repository.calls, [
            'fetch',
            ('refs', [2, 3]),
            ('update', 1),
            ('insert', 1),
            ('delete', [2]),
        ])
        self.assertEqual((result.updated, result.inserted, result.deleted), (1, 1, 1))
        self.assertEqual(len(result.warnings), 1)

    def test_duplicate_client_rows_are_rejected(self):
        repository = RecordingRepository(stored=[], referenced=())
        with self.assertRaises(DuplicateVariantCombination):
            VariantPersistenceService(repository).save(
                Product(name='Máy khoan thử'),
                [VariantDraft(RED_M), VariantDraft({'Size': 'M', 'Màu sắc': 'Đỏ'})]
            )
        self.assertEqual(repository.calls, [])


class VariantPersistenceServiceTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(name='Máy khoan Bosch GSB 550')
        self.red_m = TestDataFactory.create_variant(self.product, RED_M, price='100000', stock=3, sku='GSB-DM')
        self.red_l = TestDataFactory.create_variant(self.product, RED_L, price='110000')
        self.service = VariantPersistenceService()

    def test_create_variants_for_new_product(self):
        product = TestDataFactory.create_product(name='Máy mài góc Makita')
        result = self.service.save(product, [
            VariantDraft({'Công suất': '720W'}, price=Decimal('850000'), stock=4, sku=' MK-720 '),
            VariantDraft({'Công suất': '1050W'}),
        ])

        self.assertEqual(result.inserted, 2)
        variants = list(product.variants.order_by('id'))
        self.assertEqual(variants[0].attributes, {'Công suất': '720W'})
        self.assertEqual(variants[0].sku, 'MK-720')
        self.assertEqual(variants[0].attributes_key, '{"Công suất":"720W"}')
        self.assertEqual(variants[1].price, Decimal('0'))
        self.assertEqual(variants[0].history.count(), 1)

    def test_update_keeps_row_identity(self):
        result = self.service.save(self.product, [
            VariantDraft(RED_M, price=Decimal('120000'), stock=1, sku='GSB-DM'),
            VariantDraft(RED_L, price=Decimal('110000')),
        ])

        self.assertEqual((result.updated, result.inserted, result.deleted), (2, 0, 0))
        self.red_m.refresh_from_db()
        self.assertEqual(self.red_m.price, Decimal('120000'))
        self.assertEqual(self.red_m.stock, 1)

    def test_price_change_is_recorded(self):
        self.service.save(self.product, [
            VariantDraft(RED_M, price=Decimal('95000')),
            VariantDraft(RED_L, price=Decimal('110000')),
        ])

        history = PriceHistory.objects.get(variant=self.red_m)
        self.assertEqual(history.old_price, Decimal('100000'))
        self.assertEqual(history.new_price, Decimal('95000'))
        self.assertFalse(PriceHistory.objects.filter(variant=self.red_l).exists())

    def test_removed_rows_are_deleted(self):
        result = self.service.save(self.product, [
            VariantDraft(RED_M, price=Decimal('100000')),
            VariantDraft(BLUE_M, price=Decimal('90000')),
        ])

        self.assertEqual((result.updated, result.inserted, result.deleted), (1, 1, 1))
        self.assertEqual(result.warnings, [])
        self.assertFalse(ProductVariant.objects.filter(pk=self.red_l.pk).exists())
        self.assertEqual(
            sorted(v.label for v in self.product.variants.all()),
            ['Xanh / M', 'Đỏ / M']
        )

    def test_ordered_row_is_kept_with_warning(self):
        TestDataFactory.create_order_item(self.red_l)

        with self.assertLogs('apps.catalog.services.variant_persistence', level='WARNING'):
            result = self.service.save(self.product, [VariantDraft(RED_M)])

        self.assertEqual(result.deleted, 0)
        self.assertEqual([row.id for row in result.retained], [self.red_l.pk])
        self.assertEqual(len(result.warnings), 1)
        self.assertIn('Đỏ / L', result.warnings[0])
        self.assertTrue(ProductVariant.objects.filter(pk=self.red_l.pk).exists())

    def test_group_change_replaces_unordered_rows(self):
        TestDataFactory.create_order_item(self.red_m)

        result = self.service.save(self.product, [
            VariantDraft({'Màu sắc': 'Đỏ'}, price=Decimal('100000')),
        ])

        self.assertEqual((result.inserted, result.deleted), (1, 1))
        self.assertEqual([row.id for row in result.retained], [self.red_m.pk])
        self.assertEqual(self.product.variants.count(), 2)

    def test_failed_insert_rolls_back_everything(self):
        class FailingRepository(VariantRepository):
            def insert_variants(self, product, rows):
                raise IntegrityError('boom')

        with self.assertRaises(IntegrityError):
            VariantPersistenceService(FailingRepository()).save(self.product, [
                VariantDraft(RED_M, price=Decimal('1')),
                VariantDraft(BLUE_M),
            ])

        self.red_m.refresh_from_db()
        self.assertEqual(self.red_m.price, Decimal('100000'))
        self.assertTrue(ProductVariant.objects.filter(pk=self.red_l.pk).exists())

    def test_database_rejects_duplicate_combination(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                TestDataFactory.create_variant(self.product, {'Size': 'M', 'Màu sắc': 'Đỏ'})

    def test_ordered_variant_is_protected(self):
        TestDataFactory.create_order_item(self.red_m)
        with self.assertRaises(ProtectedError):
            self.red_m.delete()


class VariantRepositoryTests(TestCase):

    def test_order_item_refs(self):
        product = TestDataFactory.create_product()
        ordered = TestDataFactory.create_variant(product, RED_M)
        unordered = TestDataFactory.create_variant(product, RED_L)
        order = TestDataFactory.create_order()
        TestDataFactory.create_order_item(ordered, order=order)
        TestDataFactory.create_order_item(ordered, quantity=2, order=order)

        repository = VariantRepository()
        self.assertEqual(repository.fetch_order_item_variant_refs([ordered.pk, unordered.pk]), {ordered.pk})
        self.assertEqual(repository.fetch_order_item_variant_refs([]), set())

    def test_fetch_variants_in_creation_order(self):
        product = TestDataFactory.create_product()
        first = TestDataFactory.create_variant(product, RED_M)
        second = TestDataFactory.create_variant(product, RED_L)

        rows = VariantRepository().fetch_variants(product)

        self.assertEqual(rows, [StoredVariant(first.pk, RED_M), StoredVariant(second.pk, RED_L)])
