"""
Read-only analysis of a state notification from one seat's point of view.

Everything here is derived from `PublicGameState`; nothing reaches into
the engine. Valuation, auction and negotiation code share these helpers so
they agree on what "completes a monopoly" or "blocks an opponent" means.
"""

from enum import Enum
from typing import Dict, List, Optional

from tycoon.schemas import PlayerView, PublicGameState, SpaceView

# Higher is better: landing frequency and rent per pound spent
COLOR_RANKING: Dict[str, int] = {
    "orange": 10,
    "red": 9,
    "yellow": 8,
    "light_blue": 7,
    "pink": 6,
    "green": 5,
    "dark_blue": 4,
    "brown": 3,
}

RAILROAD = "railroad"
UTILITY = "utility"


class GamePhase(Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"


class BoardView:
    """
    Helpers over one snapshot, bound to the seat that is deciding.

    Args:
        state: The state notification being analysed.
        player_id: The deciding seat.
    """

    def __init__(self, state: PublicGameState, player_id: int):
        self.state = state
        self.player_id = player_id
        self.groups: Dict[str, List[int]] = {}
        for space in state.board:
            if space.color_group:
                self.groups.setdefault(space.color_group, []).append(space.position)

    # === PLAYERS ===

    @property
    def me(self) -> PlayerView:
        return self.state.player(self.player_id)

    def player(self, player_id: int) -> Optional[PlayerView]:
        return self.state.player(player_id)

    def cash_of(self, player_id: int) -> int:
        player = self.state.player(player_id)
        return player.cash if player else 0

    def opponents(self) -> List[PlayerView]:
        return [p for p in self.state.players if p.player_id != self.player_id and not p.is_bankrupt]

    def active_players(self) -> List[PlayerView]:
        return [p for p in self.state.players if not p.is_bankrupt]

    def average_cash(self) -> float:
        active = self.active_players()
        if not active:
            return 0.0
        return sum(max(p.cash, 0) for p in active) / len(active)

    def wealth_ratio(self) -> float:
        """My cash relative to the table average (1.0 = average)."""
        average = self.average_cash()
        if average <= 0:
            return 1.0
        return max(self.me.cash, 0) / average

    # === BOARD ===

    def space(self, position: int) -> SpaceView:
        return self.state.space(position)

    def ownables(self) -> List[SpaceView]:
        return [s for s in self.state.board if s.is_ownable]

    def phase(self) -> GamePhase:
        """Early while under 30% of the board is owned, late from 70%."""
        ownables = self.ownables()
        owned = sum(1 for s in ownables if s.owner_id is not None)
        ratio = owned / len(ownables) if ownables else 0.0
        if ratio < 0.3:
            return GamePhase.EARLY
        if ratio < 0.7:
            return GamePhase.MID
        return GamePhase.LATE

    def owned_ratio(self) -> float:
        ownables = self.ownables()
        if not ownables:
            return 0.0
        return sum(1 for s in ownables if s.owner_id is not None) / len(ownables)

    def group_of(self, position: int) -> List[int]:
        space = self.space(position)
        if space.color_group:
            return self.groups[space.color_group]
        return [s.position for s in self.state.board if s.kind == space.kind and s.is_ownable]

    def owned_by(self, player_id: int) -> List[int]:
        return [s.position for s in self.state.board if s.owner_id == player_id]

    def count_kind(self, player_id: int, kind: str) -> int:
        return sum(1 for s in self.state.board if s.kind == kind and s.owner_id == player_id)

    def owns_group(self, player_id: int, color: str) -> bool:
        return all(self.space(pos).owner_id == player_id for pos in self.groups.get(color, []))

    def monopolies(self, player_id: int) -> List[str]:
        return [color for color in self.groups if self.owns_group(player_id, color)]

    def group_has_buildings(self, color: Optional[str]) -> bool:
        if not color:
            return False
        return any(self.space(pos).houses > 0 for pos in self.groups[color])

    def group_progress(self, player_id: int, color: str) -> float:
        group = self.groups[color]
        return sum(1 for pos in group if self.space(pos).owner_id == player_id) / len(group)

    # === MONOPOLY AND BLOCKING ===

    def completes_monopoly(self, position: int, player_id: Optional[int] = None, also: frozenset = frozenset()) -> bool:
        """
        Would `player_id` own the whole colour group after acquiring this
        property (and anything in `also`)?
        """
        player_id = self.player_id if player_id is None else player_id
        color = self.space(position).color_group
        if not color:
            return False
        return all(
            pos == position or pos in also or self.space(pos).owner_id == player_id for pos in self.groups[color]
        )

    def blocking_owner(self, position: int) -> Optional[int]:
        """
        The opponent of the property's holder who owns every other member of
        its group, if there is one. Holding or taking this property denies
        them the monopoly.
        """
        space = self.space(position)
        color = space.color_group
        if not color:
            return None
        others = [pos for pos in self.groups[color] if pos != position]
        owners = {self.space(pos).owner_id for pos in others}
        if len(owners) != 1:
            return None
        owner = owners.pop()
        if owner is None or owner == self.player_id or owner == space.owner_id:
            return None
        return owner

    def blocks_opponent(self, position: int) -> bool:
        return self.blocking_owner(position) is not None

    def one_away_groups(self, player_id: int) -> Dict[str, int]:
        """Colour groups where the player lacks exactly one property, mapped to that property."""
        result = {}
        for color, group in self.groups.items():
            missing = [pos for pos in group if self.space(pos).owner_id != player_id]
            if len(missing) == 1 and len(group) > 1:
                result[color] = missing[0]
        return result

    def opponent_concentration(self, position: int) -> float:
        """Largest share of this property's group held by a single opponent."""
        group = self.group_of(position)
        best = 0
        for opponent in self.opponents():
            held = sum(1 for pos in group if self.space(pos).owner_id == opponent.player_id)
            best = max(best, held)
        return best / len(group) if group else 0.0
