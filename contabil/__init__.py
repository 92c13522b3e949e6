"""
Contabil - Source Package

Reconciliation and tax-computation core of a bookkeeping assistant
for Brazilian accounting offices.

DESIGN PRINCIPLES:
1. Matching suggests → Threshold decides → Human can review
2. Report imbalance, never hide it
3. No silent corrections
4. Every mutation must be auditable
5. Storage layer is swappable (and always injected)
"""

__version__ = "1.0.0"
__author__ = "Contabil Team"
