"""Names of the document collections used by the order tracker."""

ORDERS = "orders"
LEDGER_ENTRIES = "ledgerEntries"
PARTY_PAYMENTS = "partyPayments"
LEDGER_ACTIVITIES = "ledgerActivities"
INVESTMENT = "investment"
INVESTMENT_ACTIVITY = "investmentActivity"
