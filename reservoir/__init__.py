"""
reservoir: constant-product AMM and binary LMSR market pricing core
"""

__version__ = "0.1.0"
