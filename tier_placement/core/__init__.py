"""
Core module - Business logic for tier-placement

This module contains the core functionality organized by domain:
- placement: the comparison-driven insertion engine
- session: drives one placement run against a ranking store
- ranking_store: ranked tiers and the insert-and-renumber step
"""
