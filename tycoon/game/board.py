"""
The London board and per-space ownership state.

Spaces are immutable descriptions. Everything that changes during a game
(owner, buildings, mortgage) lives in `PropertyState` records keyed by
board index, so player holdings are always derived from one table.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from tycoon.game.spaces import (
    OwnableSpace,
    PropertySpace,
    RailroadSpace,
    Space,
    SpaceType,
    TaxSpace,
    UtilitySpace,
    marker,
)

BOARD_SIZE = 40
JAIL_POSITION = 10
HOTEL = 5


@dataclass
class PropertyState:
    """Tracks ownership state of an ownable space."""

    owner_id: Optional[int] = None
    houses: int = 0
    is_mortgaged: bool = False

    def is_owned(self) -> bool:
        """Check if property is owned by any player."""
        return self.owner_id is not None

    def reset(self) -> None:
        self.owner_id = None
        self.houses = 0
        self.is_mortgaged = False


class Board:
    """The 40-space board plus the mutable state of its ownable spaces."""

    def __init__(self):
        self.spaces: List[Space] = self._create_standard_board()
        self.color_groups: Dict[str, List[int]] = self._build_color_groups()
        self.states: Dict[int, PropertyState] = {
            space.position: PropertyState() for space in self.spaces if space.is_ownable
        }

    def _create_standard_board(self) -> List[Space]:
        """Create the standard London board."""
        return [
            # Bottom row (0-10)
            marker(SpaceType.GO, 0),
            PropertySpace("Old Kent Road", 1, 60, "brown", (2, 10, 30, 90, 160, 250), 50),
            marker(SpaceType.COMMUNITY_CHEST, 2),
            PropertySpace("Whitechapel Road", 3, 60, "brown", (4, 20, 60, 180, 320, 450), 50),
            TaxSpace("Income Tax", 4, 200),
            RailroadSpace("Kings Cross Station", 5),
            PropertySpace("The Angel Islington", 6, 100, "light_blue", (6, 30, 90, 270, 400, 550), 50),
            marker(SpaceType.CHANCE, 7),
            PropertySpace("Euston Road", 8, 100, "light_blue", (6, 30, 90, 270, 400, 550), 50),
            PropertySpace("Pentonville Road", 9, 120, "light_blue", (8, 40, 100, 300, 450, 600), 50),
            marker(SpaceType.JAIL, JAIL_POSITION),
            # Left side (11-20)
            PropertySpace("Pall Mall", 11, 140, "pink", (10, 50, 150, 450, 625, 750), 100),
            UtilitySpace("Electric Company", 12),
            PropertySpace("Whitehall", 13, 140, "pink", (10, 50, 150, 450, 625, 750), 100),
            PropertySpace("Northumberland Avenue", 14, 160, "pink", (12, 60, 180, 500, 700, 900), 100),
            RailroadSpace("Marylebone Station", 15),
            PropertySpace("Bow Street", 16, 180, "orange", (14, 70, 200, 550, 750, 950), 100),
            marker(SpaceType.COMMUNITY_CHEST, 17),
            PropertySpace("Marlborough Street", 18, 180, "orange", (14, 70, 200, 550, 750, 950), 100),
            PropertySpace("Vine Street", 19, 200, "orange", (16, 80, 220, 600, 800, 1000), 100),
            marker(SpaceType.FREE_PARKING, 20),
            # Top row (21-30)
            PropertySpace("Strand", 21, 220, "red", (18, 90, 250, 700, 875, 1050), 150),
            marker(SpaceType.CHANCE, 22),
            PropertySpace("Fleet Street", 23, 220, "red", (18, 90, 250, 700, 875, 1050), 150),
            PropertySpace("Trafalgar Square", 24, 240, "red", (20, 100, 300, 750, 925, 1100), 150),
            RailroadSpace("Fenchurch St Station", 25),
            PropertySpace("Leicester Square", 26, 260, "yellow", (22, 110, 330, 800, 975, 1150), 150),
            PropertySpace("Coventry Street", 27, 260, "yellow", (22, 110, 330, 800, 975, 1150), 150),
            UtilitySpace("Water Works", 28),
            PropertySpace("Piccadilly", 29, 280, "yellow", (24, 120, 360, 850, 1025, 1200), 150),
            marker(SpaceType.GO_TO_JAIL, 30),
            # Right side (31-39)
            PropertySpace("Regent Street", 31, 300, "green", (26, 130, 390, 900, 1100, 1275), 200),
            PropertySpace("Oxford Street", 32, 300, "green", (26, 130, 390, 900, 1100, 1275), 200),
            marker(SpaceType.COMMUNITY_CHEST, 33),
            PropertySpace("Bond Street", 34, 320, "green", (28, 150, 450, 1000, 1200, 1400), 200),
            RailroadSpace("Liverpool St Station", 35),
            marker(SpaceType.CHANCE, 36),
            PropertySpace("Park Lane", 37, 350, "dark_blue", (35, 175, 500, 1100, 1300, 1500), 200),
            TaxSpace("Super Tax", 38, 100),
            PropertySpace("Mayfair", 39, 400, "dark_blue", (50, 200, 600, 1400, 1700, 2000), 200),
        ]

    def _build_color_groups(self) -> Dict[str, List[int]]:
        """Build a mapping of color groups to property positions."""
        groups: Dict[str, List[int]] = {}
        for space in self.spaces:
            if isinstance(space, PropertySpace):
                groups.setdefault(space.group, []).append(space.position)
        return groups

    def get_space(self, position: int) -> Space:
        """Get the space at the given position."""
        return self.spaces[position % BOARD_SIZE]

    def get_ownable_space(self, position: int) -> Optional[OwnableSpace]:
        space = self.get_space(position)
        return space if isinstance(space, OwnableSpace) else None

    def get_property_space(self, position: int) -> Optional[PropertySpace]:
        """Get a colour property, or None if the space is anything else."""
        space = self.get_space(position)
        return space if isinstance(space, PropertySpace) else None

    def get_color_group(self, color: str) -> List[int]:
        """Get all property positions in a color group."""
        return self.color_groups.get(color, [])

    def positions_of_type(self, space_type: SpaceType) -> List[int]:
        return [s.position for s in self.spaces if s.space_type == space_type]

    def owned_by(self, player_id: int) -> List[int]:
        """Board indices owned by a player, in board order."""
        return [pos for pos, state in self.states.items() if state.owner_id == player_id]

    def count_owned(self, player_id: int, space_type: SpaceType) -> int:
        return sum(1 for pos in self.positions_of_type(space_type) if self.states[pos].owner_id == player_id)

    def owns_group(self, player_id: int, color: str) -> bool:
        """Whether a player holds every site of a colour group."""
        group = self.get_color_group(color)
        return bool(group) and all(self.states[pos].owner_id == player_id for pos in group)

    def group_has_buildings(self, color: Optional[str]) -> bool:
        if color is None:
            return False
        return any(self.states[pos].houses > 0 for pos in self.get_color_group(color))

    def find_nearest(self, position: int, space_type: SpaceType) -> int:
        """Next space of a type moving forward from a position."""
        targets = self.positions_of_type(space_type)
        for offset in range(1, BOARD_SIZE + 1):
            pos = (position + offset) % BOARD_SIZE
            if pos in targets:
                return pos
        raise ValueError(f"No {space_type.value} space on the board")
