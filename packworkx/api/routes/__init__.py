"""
API route modules.

This package contains subrouters for:
- Auth: login, refresh, logout and current user
- Companies: registration, profile and invoice number settings
- Users and Roles: administration inside a company
- Clients, Items, Purchase Orders, GRNs, Inventory and Stock Adjustments
- Invoices, Credit Notes and Debit Notes
- Machines with processes and process fields
- Reports and dashboard counters

Routers are included from packworkx.api.main (under the /api/v1 prefix).
"""
