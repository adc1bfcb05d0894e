"""
dicebag - dice and arithmetic expression engine.

Parses free-form roll commands such as ``(3d20b2 + 11) ^ (d4 * 2) / 2d100w``,
rolls the dice through an injectable random source and explains the result.
"""

__version__ = "0.1.0"
