"""
Immutable complex value used at the scalar API boundary.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Complex:
    """A point in the complex plane."""

    re: float
    im: float

    def __add__(self, other: "Complex") -> "Complex":
        return Complex(self.re + other.re, self.im + other.im)

    def __mul__(self, other: "Complex") -> "Complex":
        return Complex(
            self.re * other.re - self.im * other.im,
            self.re * other.im + self.im * other.re,
        )

    def abs2(self) -> float:
        """Squared magnitude, no square root taken."""
        return self.re * self.re + self.im * self.im

    def __complex__(self) -> complex:
        return complex(self.re, self.im)
