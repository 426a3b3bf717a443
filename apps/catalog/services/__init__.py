from .variant_combinations import (
    AttributeGroup,
    VariantDraft,
    VariantEditingSession,
    derive_attribute_groups,
    generate_combinations,
    reconcile_variants,
)
from .variant_persistence import (
    StoredVariant,
    VariantDiffPlan,
    VariantPersistenceService,
    VariantRepository,
    VariantSaveResult,
    match_stored_variants,
    plan_persistence_diff,
)

__all__ = [
    'AttributeGroup',
    'VariantDraft',
    'VariantEditingSession',
    'derive_attribute_groups',
    'generate_combinations',
    'reconcile_variants',
    'StoredVariant',
    'VariantDiffPlan',
    'VariantPersistenceService',
    'VariantRepository',
    'VariantSaveResult',
    'match_stored_variants',
    'plan_persistence_diff',
]
