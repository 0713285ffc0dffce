"""
Perceptual color-difference (DeltaE) calculators.

Three interchangeable calculators share the ``calculate(lab1, lab2)``
interface. All of them return 0 for identical inputs and are symmetric in
their arguments.
"""

import math
from abc import ABC, abstractmethod
from typing import Union

from ..core.types import DeltaEMethod, LABColor, coerce_enum

_POW25_7 = 25.0**7


class DeltaECalculator(ABC):
    """Abstract base class for DeltaE formulas."""

    method: DeltaEMethod

    @abstractmethod
    def calculate(self, lab1: LABColor, lab2: LABColor) -> float:
        """
        Compute the perceptual distance between two LAB colors.

        Returns:
            Non-negative distance
        """

    def __call__(self, lab1: LABColor, lab2: LABColor) -> float:
        return self.calculate(lab1, lab2)


class DeltaE76Calculator(DeltaECalculator):
    """CIE76: Euclidean distance in LAB."""

    method = DeltaEMethod.CIE76

    def calculate(self, lab1: LABColor, lab2: LABColor) -> float:
        return math.sqrt(
            (lab1.L - lab2.L) ** 2 + (lab1.a - lab2.a) ** 2 + (lab1.b - lab2.b) ** 2
        )


class DeltaE94Calculator(DeltaECalculator):
    """
    CIE94 graphic-arts formula.

    The published formula weights chroma and hue by the chroma of the first
    (reference) color, SC = 1 + 0.045 * C1 and SH = 1 + 0.015 * C1, which
    makes it asymmetric. The geometric mean sqrt(C1 * C2) is used as the
    reference instead, so d(a, b) == d(b, a).

    Results therefore differ from the published CIE94 whenever C1 != C2.
    They match it only for pairs of equal chroma. For example, chroma 30
    against chroma 10 at equal lightness and hue gives about 11.24 here,
    against 8.51 from the published formula.
    """

    method = DeltaEMethod.CIE94

    def __init__(self, k_l: float = 1.0, k_c: float = 1.0, k_h: float = 1.0,
                 k1: float = 0.045, k2: float = 0.015):
        self.k_l = k_l
        self.k_c = k_c
        self.k_h = k_h
        self.k1 = k1
        self.k2 = k2

    def calculate(self, lab1: LABColor, lab2: LABColor) -> float:
        delta_l = lab1.L - lab2.L
        c1 = math.hypot(lab1.a, lab1.b)
        c2 = math.hypot(lab2.a, lab2.b)
        delta_c = c1 - c2
        delta_a = lab1.a - lab2.a
        delta_b = lab1.b - lab2.b
        delta_h = math.sqrt(max(0.0, delta_a**2 + delta_b**2 - delta_c**2))

        reference_chroma = math.sqrt(c1 * c2)
        s_l = 1.0
        s_c = 1.0 + self.k1 * reference_chroma
        s_h = 1.0 + self.k2 * reference_chroma

        return math.sqrt(
            (delta_l / (self.k_l * s_l)) ** 2
            + (delta_c / (self.k_c * s_c)) ** 2
            + (delta_h / (self.k_h * s_h)) ** 2
        )


class DeltaE2000Calculator(DeltaECalculator):
    """
    CIEDE2000 following the reference procedure of Sharma, Wu and Dalal (2005).

    Hue angles are in degrees. The branch conditions for hue difference and
    mean hue must stay exactly as written; the published test data depends
    on them.
    """

    method = DeltaEMethod.CIEDE2000

    def __init__(self, k_l: float = 1.0, k_c: float = 1.0, k_h: float = 1.0):
        self.k_l = k_l
        self.k_c = k_c
        self.k_h = k_h

    @staticmethod
    def _hue_angle(a_prime: float, b: float) -> float:
        if a_prime == 0 and b == 0:
            return 0.0
        angle = math.degrees(math.atan2(b, a_prime))
        return angle + 360.0 if angle < 0 else angle

    def calculate(self, lab1: LABColor, lab2: LABColor) -> float:
        l1, a1, b1 = lab1.L, lab1.a, lab1.b
        l2, a2, b2 = lab2.L, lab2.a, lab2.b

        c1 = math.hypot(a1, b1)
        c2 = math.hypot(a2, b2)
        c_bar7 = ((c1 + c2) / 2.0) ** 7
        g = 0.5 * (1.0 - math.sqrt(c_bar7 / (c_bar7 + _POW25_7)))

        a1_prime = (1.0 + g) * a1
        a2_prime = (1.0 + g) * a2
        c1_prime = math.hypot(a1_prime, b1)
        c2_prime = math.hypot(a2_prime, b2)
        h1_prime = self._hue_angle(a1_prime, b1)
        h2_prime = self._hue_angle(a2_prime, b2)

        delta_l_prime = l2 - l1
        delta_c_prime = c2_prime - c1_prime

        chroma_product = c1_prime * c2_prime
        if chroma_product == 0:
            delta_h_angle = 0.0
        else:
            diff = h2_prime - h1_prime
            if abs(diff) <= 180.0:
                delta_h_angle = diff
            elif diff > 180.0:
                delta_h_angle = diff - 360.0
            else:
                delta_h_angle = diff + 360.0
        delta_h_prime = 2.0 * math.sqrt(chroma_product) * math.sin(
            math.radians(delta_h_angle / 2.0)
        )

        l_bar_prime = (l1 + l2) / 2.0
        c_bar_prime = (c1_prime + c2_prime) / 2.0

        hue_sum = h1_prime + h2_prime
        if chroma_product == 0:
            h_bar_prime = hue_sum
        elif abs(h1_prime - h2_prime) <= 180.0:
            h_bar_prime = hue_sum / 2.0
        elif hue_sum < 360.0:
            h_bar_prime = (hue_sum + 360.0) / 2.0
        else:
            h_bar_prime = (hue_sum - 360.0) / 2.0

        t = (
            1.0
            - 0.17 * math.cos(math.radians(h_bar_prime - 30.0))
            + 0.24 * math.cos(math.radians(2.0 * h_bar_prime))
            + 0.32 * math.cos(math.radians(3.0 * h_bar_prime + 6.0))
            - 0.20 * math.cos(math.radians(4.0 * h_bar_prime - 63.0))
        )

        delta_theta = 30.0 * math.exp(-(((h_bar_prime - 275.0) / 25.0) ** 2))
        c_bar_prime7 = c_bar_prime**7
        r_c = 2.0 * math.sqrt(c_bar_prime7 / (c_bar_prime7 + _POW25_7))

        l_offset = (l_bar_prime - 50.0) ** 2
        s_l = 1.0 + (0.015 * l_offset) / math.sqrt(20.0 + l_offset)
        s_c = 1.0 + 0.045 * c_bar_prime
        s_h = 1.0 + 0.015 * c_bar_prime * t
        r_t = -math.sin(math.radians(2.0 * delta_theta)) * r_c

        l_term = delta_l_prime / (self.k_l * s_l)
        c_term = delta_c_prime / (self.k_c * s_c)
        h_term = delta_h_prime / (self.k_h * s_h)

        # The rotation term can push the radicand a hair below zero for
        # near-identical colors
        return math.sqrt(max(0.0, l_term**2 + c_term**2 + h_term**2 + r_t * c_term * h_term))


_CALCULATORS = {
    DeltaEMethod.CIE76: DeltaE76Calculator,
    DeltaEMethod.CIE94: DeltaE94Calculator,
    DeltaEMethod.CIEDE2000: DeltaE2000Calculator,
}


def create_delta_e_calculator(
    method: Union[DeltaEMethod, str] = DeltaEMethod.CIEDE2000,
) -> DeltaECalculator:
    """
    Build the calculator for a DeltaE method.

    Args:
        method: DeltaEMethod member or its string value ("cie76", "cie94",
            "ciede2000")

    Returns:
        A fresh calculator instance

    Raises:
        InvalidInputFormatError: If method is unknown
    """
    method = coerce_enum(DeltaEMethod, method, "delta_e_method")
    return _CALCULATORS[method]()


def calculate_delta_e(
    lab1: LABColor,
    lab2: LABColor,
    method: Union[DeltaEMethod, str] = DeltaEMethod.CIEDE2000,
) -> float:
    """Compute the DeltaE between two LAB colors with the given method."""
    return create_delta_e_calculator(method).calculate(lab1, lab2)
