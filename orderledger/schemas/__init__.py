"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Document-shaped models (orders, ledger entries) keep the stored camelCase
field names on the wire and expose snake_case attributes in Python.
"""

from .common import MessageResponse  # noqa: F401
from .ledger import LedgerEntry  # noqa: F401
from .maintenance import ClearOptions, ClearSummary  # noqa: F401
from .orders import Order, OrderFilters, OrderProfitRead, PaymentRecord, PaymentStatus  # noqa: F401
from .stats import DashboardRead, DashboardStats, DateRange, StatsCalculateRequest  # noqa: F401
