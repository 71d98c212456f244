"""
Catalog Pricing Package

Product-type price resolution for an e-commerce catalog.
Resolves unit prices using Customer Group → Tier → Price pipeline with base price fallback,
and revalidates cart lines against current catalog state.
"""

__version__ = "1.0.0"
