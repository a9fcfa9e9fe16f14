"""
Kernel layer.

`cpamm/kernels/python/` holds the integer-only kernels the curve engine is built
on. Each kernel is a small set of pure functions returning frozen result
records with every intermediate value exposed for auditing.
"""
