# File: src/alkeparking/__init__.py
"""
AlkeParking - parking lot check-in, check-out and fee calculation
"""

__version__ = "1.0.0"
