"""Token Holder Distribution Analyzer.

Analyzes how an ERC-20 token's supply is spread across its holders:
top-N concentration, Gini coefficient, and whale/large/medium/small tiers.
"""

__version__ = "0.1.0"
