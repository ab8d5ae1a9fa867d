"""
Weighted-mean backends.

Available backends:
    CPUWeightedMeanBackend: weighted means of all attribute columns
    RandomizedDraw: one attribute-permutation draw
"""

from pycwm.cwm.backends.cpu import CPUWeightedMeanBackend, RandomizedDraw

__all__ = [
    "CPUWeightedMeanBackend",
    "RandomizedDraw",
]
