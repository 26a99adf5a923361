"""
API route modules.

This package contains subrouters for:
- Stats: dashboard statistics, date windows and ad-hoc calculation
- Orders: per-order profit reconciliation
- Maintenance: bulk clearing of financial records
- Reports: order statement and ledger exports

Routers are included from orderledger.api.main (under the /api/v1 prefix).
"""
