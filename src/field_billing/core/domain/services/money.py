"""
Arredondamento monetário canônico.

Toda soma ou subtração de valores em reais passa por `round2` antes de ser
comparada ou persistida; o limiar de 1 centavo (`MONEY_EPSILON`) é o mesmo em
todo o núcleo.
"""
from __future__ import annotations

import math
import sys
from collections.abc import Iterable

MONEY_EPSILON = 0.01


def round2(value: float) -> float:
    """
    Arredonda para 2 casas somando o epsilon da máquina e arredondando
    metade para longe de zero (ex.: 0.1 + 0.2 -> 0.3, 1.005 -> 1.01).
    """
    if not math.isfinite(value):
        return value
    shifted = (abs(value) + sys.float_info.epsilon) * 100
    rounded = math.floor(shifted + 0.5) / 100
    return math.copysign(rounded, value) if rounded else 0.0


def money_sum(values: Iterable[float]) -> float:
    return round2(sum(values, 0.0))


def is_zero(value: float) -> bool:
    """Considera zero qualquer valor com módulo até 1 centavo."""
    return abs(round2(value)) <= MONEY_EPSILON
