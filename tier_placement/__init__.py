"""
tier-placement - ranked insertion of a new item into a sentiment tier

The engine lives in ``tier_placement.core.placement``; the session driver and
ranking stores that call it live beside it in ``tier_placement.core``.
"""

__version__ = "0.1.0"
