"""
Variant combination engine used by the admin product form.

The operator describes a product with attribute groups
(e.g. "Màu sắc": Đỏ, Xanh / "Size": M, L). Every combination of one value per
group becomes a variant row with its own price, stock and SKU. The engine:

- expands the groups into their Cartesian product
- merges the result with the rows the operator already filled in, so
  regenerating never wipes entered prices
- keeps combinations the operator explicitly removed out of the table

Everything here is pure: no database access, no request state.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from itertools import product as cartesian_product
from math import prod
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from django.conf import settings

from apps.catalog.exceptions import CombinationLimitExceeded, DuplicateAttributeValue
from apps.catalog.utils import combination_key, combination_label

logger = logging.getLogger(__name__)

AttributeMap = Dict[str, str]

DEFAULT_MAX_COMBINATIONS = 500
DEFAULT_ATTRIBUTE_GROUP = 'Màu sắc'


def max_combinations() -> int:
    return getattr(settings, 'CATALOG_MAX_VARIANT_COMBINATIONS', DEFAULT_MAX_COMBINATIONS)


@dataclass(frozen=True)
class AttributeGroup:
    """A named attribute and its ordered values, e.g. Size: M, L, XL."""
    name: str
    values: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'values', tuple(self.values))

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and len(self.values) > 0

    def with_value(self, value: str) -> 'AttributeGroup':
        """
        Return a copy with ``value`` appended.

        Blank input is ignored. A value already present in the group raises
        DuplicateAttributeValue.
        """
        value = str(value).strip()
        if not value:
            return self
        if value in self.values:
            raise DuplicateAttributeValue(self.name, value)
        return replace(self, values=self.values + (value,))

    def without_value(self, value: str) -> 'AttributeGroup':
        return replace(self, values=tuple(v for v in self.values if v != value))

    def to_dict(self) -> Dict:
        return {'name': self.name, 'values': list(self.values)}


@dataclass(frozen=True)
class VariantDraft:
    """
    One row of the variant table being edited.
    ``id`` is set only for rows loaded from the database.
    """
    attributes: AttributeMap
    price: Decimal = Decimal('0')
    stock: int = 0
    sku: str = ''
    id: Optional[int] = None

    @property
    def key(self) -> str:
        return combination_key(self.attributes)

    @property
    def label(self) -> str:
        return combination_label(self.attributes)


def generate_combinations(
    groups: Sequence[AttributeGroup],
    limit: Optional[int] = None
) -> List[AttributeMap]:
    """
    Expand attribute groups into every combination of one value per group.

    Groups without a name or without values are left out. The first group
    varies slowest and the last group fastest:

        Màu sắc: Đỏ, Xanh / Size: M, L
        -> Đỏ/M, Đỏ/L, Xanh/M, Xanh/L

    Values are used as given; a value repeated inside a group yields
    repeated combinations.

    Raises:
        CombinationLimitExceeded: the groups would produce more than
            ``limit`` combinations (CATALOG_MAX_VARIANT_COMBINATIONS).
    """
    valid_groups = [group for group in groups if group.is_valid]
    if not valid_groups:
        return []

    total = prod(len(group.values) for group in valid_groups)
    limit = max_combinations() if limit is None else limit
    if total > limit:
        raise CombinationLimitExceeded(total, limit)

    names = [group.name for group in valid_groups]
    return [
        dict(zip(names, values))
        for values in cartesian_product(*(group.values for group in valid_groups))
    ]


def _is_projection(existing: AttributeMap, combination: AttributeMap) -> bool:
    """True when every pair of the smaller map is also in the larger one."""
    if not existing or not combination:
        return False
    if len(existing) <= len(combination):
        smaller, larger = existing, combination
    else:
        smaller, larger = combination, existing
    return all(name in larger and larger[name] == value for name, value in smaller.items())


def _find_predecessor(combination: AttributeMap, current: Sequence[VariantDraft]) -> Optional[VariantDraft]:
    for variant in current:
        if _is_projection(variant.attributes, combination):
            return variant
    return None


def reconcile_variants(
    generated: Iterable[AttributeMap],
    current: Sequence[VariantDraft],
    deleted_combinations: Iterable[str] = ()
) -> List[VariantDraft]:
    """
    Build the new variant table from freshly generated combinations.

    Args:
        generated: output of generate_combinations
        current: the rows as they are now, possibly with operator input
        deleted_combinations: combination keys the operator removed

    Returns:
        One VariantDraft per generated combination not in
        ``deleted_combinations``, in generation order. A combination already
        in ``current`` keeps its price, stock, sku and id. A combination that
        extends or narrows an existing row (a group was added or removed)
        inherits that row's price, stock and sku but not its id. Anything
        else starts at zero.

    Only rows in ``current`` are looked at, so the result depends on how the
    groups were edited. Adding Size with M and L in one step gives both
    {Đỏ, M} and {Đỏ, L} the price of {Đỏ}. Adding M first and L afterwards
    gives {Đỏ, L} nothing: {Đỏ} is gone by then and {Đỏ, M} is neither a
    sub-map nor a super-map of it.
    """
    deleted = set(deleted_combinations)
    current = list(current)

    by_key: Dict[str, VariantDraft] = {}
    for variant in current:
        by_key.setdefault(variant.key, variant)

    reconciled = []
    for combination in generated:
        key = combination_key(combination)
        if key in deleted:
            continue

        existing = by_key.get(key)
        if existing is not None:
            reconciled.append(replace(existing, attributes=dict(combination)))
            continue

        predecessor = _find_predecessor(combination, current)
        if predecessor is not None:
            reconciled.append(VariantDraft(
                attributes=dict(combination),
                price=predecessor.price,
                stock=predecessor.stock,
                sku=predecessor.sku,
            ))
        else:
            reconciled.append(VariantDraft(attributes=dict(combination)))

    return reconciled


def derive_attribute_groups(attribute_maps: Iterable[AttributeMap]) -> List[AttributeGroup]:
    """
    Rebuild attribute groups from stored variant maps.
    Names and values keep the order they are first seen in.
    """
    values_by_name: Dict[str, List[str]] = {}
    for attributes in attribute_maps:
        for name, value in (attributes or {}).items():
            values = values_by_name.setdefault(name, [])
            if value not in values:
                values.append(value)
    return [AttributeGroup(name, tuple(values)) for name, values in values_by_name.items()]


@dataclass(frozen=True)
class VariantEditingSession:
    """
    Everything the product form edits about variants, as one value.

    Each operation returns a new session; the form stores the latest one and
    re-renders from it.
    """
    groups: Tuple[AttributeGroup, ...] = ()
    variants: Tuple[VariantDraft, ...] = ()
    deleted_combinations: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, 'groups', tuple(self.groups))
        object.__setattr__(self, 'variants', tuple(self.variants))
        object.__setattr__(self, 'deleted_combinations', frozenset(self.deleted_combinations))

    @classmethod
    def for_create(cls) -> 'VariantEditingSession':
        name = getattr(settings, 'CATALOG_DEFAULT_ATTRIBUTE_GROUP', DEFAULT_ATTRIBUTE_GROUP)
        return cls(groups=(AttributeGroup(name),))

    @classmethod
    def from_variants(cls, variants: Iterable[VariantDraft]) -> 'VariantEditingSession':
        """
        Session for editing a stored product.

        Groups are rebuilt from the stored maps and the table is regenerated
        from them, so every combination of those groups is on screen. Stored
        rows keep their id, price, stock and sku; the other combinations are
        filled as reconcile_variants fills them.
        """
        variants = tuple(variants)
        groups = derive_attribute_groups(variant.attributes for variant in variants)
        if not groups:
            return cls.for_create()
        return cls(groups=groups, variants=variants).regenerate()

    def regenerate(self) -> 'VariantEditingSession':
        generated = generate_combinations(self.groups)
        variants = reconcile_variants(generated, self.variants, self.deleted_combinations)
        logger.debug(
            "Regenerated variants: %d combinations, %d rows, %d removed",
            len(generated), len(variants), len(self.deleted_combinations)
        )
        return replace(self, variants=tuple(variants))

    def with_groups(self, groups: Iterable[AttributeGroup]) -> 'VariantEditingSession':
        groups = tuple(groups)
        if groups == self.groups:
            return self
        return replace(self, groups=groups).regenerate()

    def add_group(self, name: str = '') -> 'VariantEditingSession':
        return self.with_groups(self.groups + (AttributeGroup(name.strip()),))

    def remove_group(self, index: int) -> 'VariantEditingSession':
        groups = list(self.groups)
        del groups[index]
        return self.with_groups(groups)

    def rename_group(self, index: int, name: str) -> 'VariantEditingSession':
        groups = list(self.groups)
        groups[index] = replace(groups[index], name=name.strip())
        return self.with_groups(groups)

    def add_value(self, index: int, value: str) -> 'VariantEditingSession':
        groups = list(self.groups)
        groups[index] = groups[index].with_value(value)
        return self.with_groups(groups)

    def remove_value(self, index: int, value: str) -> 'VariantEditingSession':
        groups = list(self.groups)
        groups[index] = groups[index].without_value(value)
        return self.with_groups(groups)

    def remove_variant(self, attributes: AttributeMap) -> 'VariantEditingSession':
        """Drop a row and keep its combination out of later regenerations."""
        deleted = self.deleted_combinations | {combination_key(attributes)}
        return replace(self, deleted_combinations=deleted).regenerate()

    def update_variant(self, attributes: AttributeMap, **fields) -> 'VariantEditingSession':
        """
        Change price, stock or sku of one row. The table is not regenerated.
        Unknown combinations leave the session unchanged.
        """
        key = combination_key(attributes)
        allowed = {name: value for name, value in fields.items() if name in ('price', 'stock', 'sku')}
        variants = list(self.variants)
        for index, variant in enumerate(variants):
            if variant.key == key:
                variants[index] = replace(variant, **allowed)
                return replace(self, variants=tuple(variants))
        logger.debug("update_variant: no row for %s", key)
        return self
