"""
Licenses module - License and Subscription management.

This module handles:
- License key generation and checksum validation
- License and Subscription entities and domain logic
- License status evaluation and the seat ledger
- Administrative lifecycle (revoke, suspend, reinstate, renew)
- Expiry sweep and expiration warnings
"""
