from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card entry in a decklist.

    Attributes:
        name: Card name as written in the decklist (display form)
        quantity: Number of copies. Only meaningful for basic lands;
            Commander is singleton so every other card is conceptually 1.
    """

    name: str
    quantity: int = 1
