"""
Landing Zone Planner

Compiles multi-account landing zone configuration into ordered deployment
units per (account, region): scope resolution, existence checks against a
prior-state inventory, partitioning into narrow units and dependency
ordering.
"""

__version__ = "0.1.0"
