"""
Service layer: profit adjustment, dashboard statistics and financial maintenance.

Calculation helpers are plain functions; services orchestrate repositories
around them.
"""
