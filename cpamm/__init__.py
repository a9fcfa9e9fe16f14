"""
cpamm: deterministic two-asset constant-product pool engine.
"""

__version__ = "0.1.0"
