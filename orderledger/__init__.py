"""
Order Ledger API.

Financial reconciliation for a material-delivery order tracker: adjusted order
profit, dashboard statistics over orders and ledger entries, and batched
maintenance sweeps over the document store.
"""
