"""Low-level numerical kernels and special functions.

This subpackage contains the Numba-accelerated surface-integral kernel and the
special functions it is fed with.
"""
