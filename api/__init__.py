"""
HTTP API.

Versioned DRF views for POS clients (``v1/license``) and administrators
(``v1/admin``) plus the shared exception handler and admin authentication.
"""
