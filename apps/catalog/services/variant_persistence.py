"""
Saving the edited variant table of a product.

The table coming from the product form is matched against the stored rows by
attribute combination:

- matched rows are updated in place (their id, and every order pointing at
  them, is preserved)
- new combinations are inserted
- stored combinations that disappeared are deleted, unless an order line
  item still points at them; those rows stay and the operator gets a warning
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from django.db import transaction
from simple_history.utils import bulk_create_with_history

from apps.catalog.exceptions import DuplicateVariantCombination
from apps.catalog.models import ProductVariant
from apps.catalog.utils import combination_key, combination_label
from .variant_combinations import AttributeMap, VariantDraft

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredVariant:
    """The part of a stored variant row needed for matching."""
    id: int
    attributes: AttributeMap

    @property
    def key(self) -> str:
        return combination_key(self.attributes)

    @property
    def label(self) -> str:
        return combination_label(self.attributes)


@dataclass
class VariantMatch:
    matched: List[Tuple[VariantDraft, StoredVariant]] = field(default_factory=list)
    unmatched_client: List[VariantDraft] = field(default_factory=list)
    unmatched_server: List[StoredVariant] = field(default_factory=list)


@dataclass
class VariantDiffPlan:
    to_update: List[Tuple[int, VariantDraft]] = field(default_factory=list)
    to_insert: List[VariantDraft] = field(default_factory=list)
    to_delete: List[int] = field(default_factory=list)
    to_retain_with_warning: List[StoredVariant] = field(default_factory=list)

    def retention_warning(self) -> Optional[str]:
        if not self.to_retain_with_warning:
            return None
        labels = ', '.join(row.label for row in self.to_retain_with_warning)
        return (
            f"{len(self.to_retain_with_warning)} biến thể không thể xóa: "
            f"các biến thể \"{labels}\" đang được liên kết với đơn hàng nên không thể xóa. "
            f"Chúng sẽ được giữ lại trong hệ thống."
        )


def find_duplicate_combinations(variants: Iterable) -> List[str]:
    """Keys that occur more than once in ``variants`` (anything with ``.key``)."""
    counts = Counter(variant.key for variant in variants)
    return [key for key, count in counts.items() if count > 1]


def match_stored_variants(
    client_variants: Sequence[VariantDraft],
    server_variants: Sequence[StoredVariant]
) -> VariantMatch:
    """
    Pair each client row with at most one stored row holding the same
    combination. Stored rows are consumed in their given order.
    """
    server_variants = list(server_variants)

    duplicates = find_duplicate_combinations(server_variants)
    if duplicates:
        # Should not exist given the unique constraint; first match wins
        logger.warning("Stored variants share a combination: %s", ', '.join(duplicates))

    available: Dict[str, List[StoredVariant]] = {}
    for row in server_variants:
        available.setdefault(row.key, []).append(row)

    match = VariantMatch()
    for draft in client_variants:
        candidates = available.get(draft.key)
        if candidates:
            match.matched.append((draft, candidates.pop(0)))
        else:
            match.unmatched_client.append(draft)

    matched_ids = {row.id for _, row in match.matched}
    match.unmatched_server = [row for row in server_variants if row.id not in matched_ids]
    return match


def plan_persistence_diff(
    client_variants: Sequence[VariantDraft],
    server_variants: Sequence[StoredVariant],
    referenced_ids: Iterable[int]
) -> VariantDiffPlan:
    """
    Decide what to update, insert, delete and keep.

    Args:
        client_variants: the edited table
        server_variants: rows currently stored for the product
        referenced_ids: ids of stored rows used by at least one order item

    A stored row missing from the client table is deleted only when its id
    is not in ``referenced_ids``; otherwise it is listed in
    ``to_retain_with_warning`` and left alone.
    """
    match = match_stored_variants(client_variants, server_variants)
    referenced = set(referenced_ids)

    plan = VariantDiffPlan(
        to_update=[(row.id, draft) for draft, row in match.matched],
        to_insert=list(match.unmatched_client),
    )
    for row in match.unmatched_server:
        if row.id in referenced:
            plan.to_retain_with_warning.append(row)
        else:
            plan.to_delete.append(row.id)
    return plan


def draft_fields(draft: VariantDraft) -> Dict:
    return {
        'attributes': dict(draft.attributes),
        'price': Decimal(str(draft.price or 0)),
        'stock': int(draft.stock or 0),
        'sku': (draft.sku or '').strip(),
    }


class VariantRepository:
    """Database access for product variants."""

    def fetch_variants(self, product) -> List[StoredVariant]:
        rows = ProductVariant.objects.filter(product=product).order_by(
            'created_at', 'id'
        ).values_list('id', 'attributes')
        return [StoredVariant(id=pk, attributes=attributes or {}) for pk, attributes in rows]

    def fetch_order_item_variant_refs(self, variant_ids: Iterable[int]) -> Set[int]:
        variant_ids = list(variant_ids)
        if not variant_ids:
            return set()
        return set(
            ProductVariant.objects.filter(
                pk__in=variant_ids,
                order_items__isnull=False
            ).values_list('pk', flat=True).distinct()
        )

    def update_variant(self, variant_id: int, fields: Dict) -> None:
        variant = ProductVariant.objects.get(pk=variant_id)
        for name, value in fields.items():
            setattr(variant, name, value)
        variant.save()

    def insert_variants(self, product, rows: Sequence[Dict]) -> List[ProductVariant]:
        variants = []
        for row in rows:
            variant = ProductVariant(product=product, **row)
            variant.attributes_key = combination_key(variant.attributes)
            variants.append(variant)
        return bulk_create_with_history(variants, ProductVariant)

    def delete_variants(self, variant_ids: Sequence[int]) -> int:
        deleted, _ = ProductVariant.objects.filter(pk__in=variant_ids).delete()
        return deleted


@dataclass
class VariantSaveResult:
    updated: int = 0
    inserted: int = 0
    deleted: int = 0
    retained: List[StoredVariant] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict:
        return {
            'updated': self.updated,
            'inserted': self.inserted,
            'deleted': self.deleted,
            'retained': [row.id for row in self.retained],
            'warnings': list(self.warnings),
        }


class VariantPersistenceService:
    """
    Apply an edited variant table to a product.

    All writes happen in one transaction: if any statement fails nothing is
    committed and the error propagates to the caller.
    """

    def __init__(self, repository: Optional[VariantRepository] = None):
        self.repository = repository or VariantRepository()

    def save(self, product, drafts: Iterable[VariantDraft]) -> VariantSaveResult:
        drafts = list(drafts)

        duplicates = find_duplicate_combinations(drafts)
        if duplicates:
            raise DuplicateVariantCombination(duplicates)

        with transaction.atomic():
            server_variants = self.repository.fetch_variants(product)
            match = match_stored_variants(drafts, server_variants)
            referenced_ids = self.repository.fetch_order_item_variant_refs(
                row.id for row in match.unmatched_server
            )
            plan = plan_persistence_diff(drafts, server_variants, referenced_ids)

            for variant_id, draft in plan.to_update:
                self.repository.update_variant(variant_id, draft_fields(draft))

            if plan.to_insert:
                self.repository.insert_variants(
                    product, [draft_fields(draft) for draft in plan.to_insert]
                )

            # Only after the reference check above
            if plan.to_delete:
                self.repository.delete_variants(plan.to_delete)

        result = VariantSaveResult(
            updated=len(plan.to_update),
            inserted=len(plan.to_insert),
            deleted=len(plan.to_delete),
            retained=list(plan.to_retain_with_warning),
        )
        warning = plan.retention_warning()
        if warning:
            result.warnings.append(warning)
            logger.warning(
                "Product %s: kept %d variants referenced by orders: %s",
                product.pk, len(result.retained), [row.id for row in result.retained]
            )

        logger.info(
            "Product %s variants saved: %d updated, %d inserted, %d deleted",
            product.pk, result.updated, result.inserted, result.deleted
        )
        return result
