"""Price tiers and cart partitions.

A product always carries four prices. Tiers 1-3 are the general price lists;
tier 4 is reserved for the restricted "special" list and is quoted in its own
cart partition.
"""

from enum import Enum, IntEnum


class PriceTier(IntEnum):
    LIST_1 = 1
    LIST_2 = 2
    LIST_3 = 3
    SPECIAL = 4

    @property
    def field(self) -> str:
        """Name of the product column holding this tier's price."""
        return TIER_FIELDS[self]

    @property
    def is_special(self) -> bool:
        return self is PriceTier.SPECIAL


TIER_FIELDS: dict[PriceTier, str] = {tier: f"price_{tier.value}" for tier in PriceTier}


class CartScope(str, Enum):
    """Which cart partition an operation applies to."""

    ALL = "all"
    GENERAL = "general"  # tiers 1-3
    SPECIAL = "special"  # tier 4 only

    def includes(self, tier: PriceTier) -> bool:
        if self is CartScope.ALL:
            return True
        if self is CartScope.SPECIAL:
            return tier.is_special
        return not tier.is_special

    @classmethod
    def for_tier(cls, tier: PriceTier) -> "CartScope":
        return cls.SPECIAL if tier.is_special else cls.GENERAL
