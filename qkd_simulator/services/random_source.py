import numpy as np
from typing import Protocol, Union
from ..models.qkd_models import Basis

class RandomSource(Protocol):
    """Source of uniformly random bits and bases."""

    def random_bit(self) -> int: ...

    def random_basis(self) -> Basis: ...

class NumpyRandomSource:
    """
    RandomSource backed by a numpy Generator.

    The same seed always replays the same stream of bits and bases.
    """

    def __init__(self, seed: Union[int, np.random.SeedSequence, None] = None):
        self.rng = np.random.default_rng(seed)

    def random_bit(self) -> int:
        return int(self.rng.integers(0, 2))

    def random_basis(self) -> Basis:
        return Basis.RECTILINEAR if self.rng.integers(0, 2) == 0 else Basis.DIAGONAL
