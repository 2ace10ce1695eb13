"""
Activations module - Machine activation and client check-ins.

This module handles:
- Activation entity and domain logic
- Activation tokens for POS clients
- License validation requests from activated machines
"""
