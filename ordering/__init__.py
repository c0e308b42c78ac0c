"""
Ordering: persistence models and domain services for tenants, menus,
tables, and orders.
"""
