"""Catalog entries referenced by carts and orders."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class MainMealItem:
    """Main menu meal priced per unit."""

    id: UUID
    name: str
    regular_price: float
    visible: bool = True


@dataclass(frozen=True)
class OfferedMealItem:
    """Offered package priced per unit."""

    id: UUID
    name: str
    price: float
    visible: bool = True


@dataclass(frozen=True)
class CustomizedMealItem:
    """Customizable meal with nutrition facts and pricing coefficients.

    ``prp``, ``prc`` and ``prf`` are prices per gram of protein, carbs and fat.
    ``mf``, ``sf`` and ``of`` convert macro grams into meat, starch and oil
    quantities; ``fmf`` is the fat-in-meat factor.
    """

    id: UUID
    name: str
    diet: str
    protein: float
    fadd: float
    carbs: float
    prp: float
    prc: float
    prf: float
    mf: float
    sf: float
    of: float
    fmf: float
    visible: bool = True
