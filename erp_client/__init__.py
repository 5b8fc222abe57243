"""
erp_client
==========

Client-side data layer for a small-business ERP backend: a shared resource
store with de-duplicated lazy loading, document numbering, derived totals,
cross-entity stock consistency and per-entity mutation controllers.
"""

__version__ = "0.1.0"
