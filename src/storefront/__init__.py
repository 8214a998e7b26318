"""Storefront checkout backend.

Order validation, append-only order audit trail and checkout orchestration
for the storefront's guest and authenticated flows.
"""

__version__ = "0.1.0"
