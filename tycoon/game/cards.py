"""
Chance and Community Chest card system.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class CardType(Enum):
    """Types of card effects."""

    MOVE_TO = "move_to"
    MOVE_BACK = "move_back"
    MONEY = "money"
    MONEY_FROM_PLAYERS = "money_from_players"
    GO_TO_JAIL = "go_to_jail"
    GET_OUT_OF_JAIL = "get_out_of_jail"
    REPAIRS = "repairs"
    NEAREST_RAILROAD = "nearest_railroad"
    NEAREST_UTILITY = "nearest_utility"


@dataclass(frozen=True)
class Card:
    """A Chance or Community Chest card."""

    description: str
    card_type: CardType
    # Signed amount for MONEY and MONEY_FROM_PLAYERS, spaces for MOVE_BACK
    value: int = 0
    # Per-house and per-hotel costs for REPAIRS
    house_cost: int = 0
    hotel_cost: int = 0
    target_position: Optional[int] = None

    def __repr__(self) -> str:
        return f"Card('{self.description}')"


class Deck:
    """
    A pre-shuffled deck drawn in a cycle.

    The draw index wraps around to the top; when it does, the whole deck is
    reshuffled with the game's random source.
    """

    def __init__(self, name: str, cards: List[Card], rng: random.Random, shuffle: bool = True):
        self.name = name
        self.cards = list(cards)
        self.rng = rng
        self.index = 0
        if shuffle:
            self.rng.shuffle(self.cards)

    def draw(self) -> Card:
        card = self.cards[self.index]
        self.index = (self.index + 1) % len(self.cards)
        if self.index == 0:
            self.rng.shuffle(self.cards)
        return card

    def __len__(self) -> int:
        return len(self.cards)


def chance_cards() -> List[Card]:
    return [
        Card("Advance to GO. Collect £200.", CardType.MOVE_TO, target_position=0),
        Card("Advance to Trafalgar Square. If you pass GO, collect £200.", CardType.MOVE_TO, target_position=24),
        Card("Advance to Pall Mall. If you pass GO, collect £200.", CardType.MOVE_TO, target_position=11),
        Card(
            "Advance to nearest Utility. If unowned, you may buy it. If owned, pay owner 10x dice roll.",
            CardType.NEAREST_UTILITY,
        ),
        Card("Advance to nearest Station. Pay owner twice the rental.", CardType.NEAREST_RAILROAD),
        Card("Bank pays you dividend of £50.", CardType.MONEY, value=50),
        Card("Get Out of Jail Free.", CardType.GET_OUT_OF_JAIL),
        Card("Go Back 3 Spaces.", CardType.MOVE_BACK, value=3),
        Card("Go to Jail. Do not pass GO, do not collect £200.", CardType.GO_TO_JAIL),
        Card(
            "Make general repairs on all your property. £25 per house, £100 per hotel.",
            CardType.REPAIRS,
            house_cost=25,
            hotel_cost=100,
        ),
        Card("Pay school fees of £150.", CardType.MONEY, value=-150),
        Card("Take a trip to Kings Cross Station. If you pass GO, collect £200.", CardType.MOVE_TO, target_position=5),
        Card("Advance to Mayfair.", CardType.MOVE_TO, target_position=39),
        Card(
            "You have been elected Chairman of the Board. Pay each player £50.",
            CardType.MONEY_FROM_PLAYERS,
            value=-50,
        ),
        Card("Your building loan matures. Collect £150.", CardType.MONEY, value=150),
        Card("You have won a crossword competition. Collect £100.", CardType.MONEY, value=100),
    ]


def community_chest_cards() -> List[Card]:
    return [
        Card("Advance to GO. Collect £200.", CardType.MOVE_TO, target_position=0),
        Card("Bank error in your favour. Collect £200.", CardType.MONEY, value=200),
        Card("Doctor's fees. Pay £50.", CardType.MONEY, value=-50),
        Card("From sale of stock you get £50.", CardType.MONEY, value=50),
        Card("Get Out of Jail Free.", CardType.GET_OUT_OF_JAIL),
        Card("Go to Jail. Do not pass GO, do not collect £200.", CardType.GO_TO_JAIL),
        Card("Grand Opera Night. Collect £50 from every player.", CardType.MONEY_FROM_PLAYERS, value=50),
        Card("Holiday fund matures. Receive £100.", CardType.MONEY, value=100),
        Card("Income tax refund. Collect £20.", CardType.MONEY, value=20),
        Card("It is your birthday. Collect £10 from every player.", CardType.MONEY_FROM_PLAYERS, value=10),
        Card("Life insurance matures. Collect £100.", CardType.MONEY, value=100),
        Card("Hospital fees. Pay £100.", CardType.MONEY, value=-100),
        Card("School fees. Pay £50.", CardType.MONEY, value=-50),
        Card("Receive £25 consultancy fee.", CardType.MONEY, value=25),
        Card(
            "You are assessed for street repairs. £40 per house, £115 per hotel.",
            CardType.REPAIRS,
            house_cost=40,
            hotel_cost=115,
        ),
        Card("You have won second prize in a beauty contest. Collect £10.", CardType.MONEY, value=10),
        Card("You inherit £100.", CardType.MONEY, value=100),
    ]


def create_chance_deck(rng: random.Random) -> Deck:
    return Deck("chance", chance_cards(), rng)


def create_community_chest_deck(rng: random.Random) -> Deck:
    return Deck("community_chest", community_chest_cards(), rng)
