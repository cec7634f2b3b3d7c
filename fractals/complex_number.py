"""Complex number value type used by the fractal kernels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Complex:
    """A 64-bit complex number with value semantics."""

    real: float = 0.0
    imag: float = 0.0

    @classmethod
    def from_builtin(cls, value: complex) -> Complex:
        return cls(float(value.real), float(value.imag))

    def to_builtin(self) -> complex:
        return complex(self.real, self.imag)

    def square_length(self) -> float:
        return self.real * self.real + self.imag * self.imag

    def norm(self) -> float:
        return math.sqrt(self.square_length())

    def mul_by(self, other: Complex) -> Complex:
        return Complex(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    def powi(self, power: int) -> Complex:
        """Raise to a non-negative integer power by square-and-multiply."""

        if power < 0:
            raise ValueError(f"power must be non-negative, got {power}")
        if power == 0:
            return Complex(1.0, 0.0)
        if power == 1:
            return self
        if power == 2:
            return self.mul_by(self)
        if power == 3:
            return self.mul_by(self).mul_by(self)

        res = Complex(1.0, 0.0)
        curr = self
        while True:
            if power & 0x1:
                res = res.mul_by(curr)
            power >>= 1
            if power == 0:
                break
            curr = curr.mul_by(curr)
        return res

    def __add__(self, other: Complex) -> Complex:
        if not isinstance(other, Complex):
            return NotImplemented
        return Complex(self.real + other.real, self.imag + other.imag)

    def __sub__(self, other: Complex) -> Complex:
        if not isinstance(other, Complex):
            return NotImplemented
        return Complex(self.real - other.real, self.imag - other.imag)

    def __mul__(self, other: Union[Complex, float, int]) -> Complex:
        if isinstance(other, Complex):
            return self.mul_by(other)
        if isinstance(other, (int, float)):
            return Complex(self.real * other, self.imag * other)
        return NotImplemented

    def __rmul__(self, other: Union[float, int]) -> Complex:
        if isinstance(other, (int, float)):
            return Complex(self.real * other, self.imag * other)
        return NotImplemented

    def __neg__(self) -> Complex:
        return Complex(-self.real, -self.imag)

    def __str__(self) -> str:
        return f"({self.real}+i{self.imag})"
