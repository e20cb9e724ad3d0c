"""
Board space definitions and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class SpaceType(Enum):
    """Types of spaces on the board."""

    GO = "go"
    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    TAX = "tax"
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"
    JAIL = "jail"
    GO_TO_JAIL = "go_to_jail"
    FREE_PARKING = "free_parking"


OWNABLE_TYPES = (SpaceType.PROPERTY, SpaceType.RAILROAD, SpaceType.UTILITY)


@dataclass
class Space:
    """Base class for a board space."""

    name: str
    position: int
    space_type: SpaceType

    @property
    def is_ownable(self) -> bool:
        return self.space_type in OWNABLE_TYPES

    @property
    def color_group(self) -> Optional[str]:
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', position={self.position})"


@dataclass
class OwnableSpace(Space):
    """A space that can be bought, mortgaged and charged rent on."""

    price: int
    mortgage_value: int

    def __init__(self, name: str, position: int, space_type: SpaceType, price: int, mortgage_value: int):
        super().__init__(name, position, space_type)
        self.price = price
        self.mortgage_value = mortgage_value


@dataclass
class PropertySpace(OwnableSpace):
    """A colour-group site that can be built upon."""

    group: str
    rents: Tuple[int, int, int, int, int, int]
    house_cost: int

    def __init__(
        self,
        name: str,
        position: int,
        price: int,
        group: str,
        rents: Tuple[int, int, int, int, int, int],
        house_cost: int,
        mortgage_value: Optional[int] = None,
    ):
        super().__init__(
            name,
            position,
            SpaceType.PROPERTY,
            price,
            mortgage_value if mortgage_value is not None else price // 2,
        )
        self.group = group
        self.rents = tuple(rents)
        self.house_cost = house_cost

    @property
    def color_group(self) -> Optional[str]:
        return self.group

    def get_rent(self, houses: int, has_monopoly: bool) -> int:
        """
        Calculate rent for this property.

        Args:
            houses: Number of houses (0-4) or 5 for hotel
            has_monopoly: Whether owner has complete color set

        Returns:
            Rent amount
        """
        if houses == 0 and has_monopoly:
            return self.rents[0] * 2
        return self.rents[houses]


@dataclass
class RailroadSpace(OwnableSpace):
    """A railway station."""

    def __init__(self, name: str, position: int, price: int = 200, mortgage_value: int = 100):
        super().__init__(name, position, SpaceType.RAILROAD, price, mortgage_value)

    def get_rent(self, railroads_owned: int) -> int:
        """Calculate rent based on number of railroads owned by the owner."""
        return 25 * (2 ** (railroads_owned - 1))


@dataclass
class UtilitySpace(OwnableSpace):
    """A utility space (Electric Company or Water Works)."""

    def __init__(self, name: str, position: int, price: int = 150, mortgage_value: int = 75):
        super().__init__(name, position, SpaceType.UTILITY, price, mortgage_value)

    def get_rent(self, dice_roll: int, utilities_owned: int) -> int:
        """Calculate rent based on dice roll and number of utilities owned."""
        multiplier = 10 if utilities_owned >= 2 else 4
        return dice_roll * multiplier


@dataclass
class TaxSpace(Space):
    """Income Tax or Super Tax."""

    amount: int

    def __init__(self, name: str, position: int, amount: int):
        super().__init__(name, position, SpaceType.TAX)
        self.amount = amount




# Spaces that carry no data beyond their kind
MARKER_NAMES = {
    SpaceType.GO: "GO",
    SpaceType.CHANCE: "Chance",
    SpaceType.COMMUNITY_CHEST: "Community Chest",
    SpaceType.JAIL: "Jail / Just Visiting",
    SpaceType.GO_TO_JAIL: "Go To Jail",
    SpaceType.FREE_PARKING: "Free Parking",
}


def marker(space_type: SpaceType, position: int) -> Space:
    return Space(MARKER_NAMES[space_type], position, space_type)
