"""
Payments module - Payments recorded against licenses.

This module handles:
- Payment entity and billing rules
- Subscription renewal and seat purchases triggered by payments
- Revenue statistics
"""
