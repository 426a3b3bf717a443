"""
Errors raised by the variant engine.

Malformed groups are skipped silently during generation; these exceptions
cover the input the engine refuses outright.
"""


class VariantError(Exception):
    """Base class for variant engine errors."""


class CombinationLimitExceeded(VariantError):
    """Attribute groups would produce more combinations than allowed."""

    def __init__(self, total, limit):
        self.total = total
        self.limit = limit
        super().__init__(
            f"Attribute groups produce {total} combinations, the limit is {limit}."
        )


class DuplicateAttributeValue(VariantError):
    """A value is already present in its attribute group."""

    def __init__(self, group_name, value):
        self.group_name = group_name
        self.value = value
        super().__init__(f"Value '{value}' already exists in group '{group_name}'.")


class DuplicateVariantCombination(VariantError):
    """The same attribute combination appears more than once in a variant list."""

    def __init__(self, keys):
        self.keys = list(keys)
        super().__init__(
            "Duplicate attribute combinations: " + ', '.join(self.keys)
        )
