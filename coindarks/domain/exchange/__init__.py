"""
Exchange bounded context: domain layer.

This module contains all domain logic for the exchange context:
- Rate resolution and USD bridging
- Margin application and order pricing
- Order guards (KYC, minimums, settlement destinations)
"""
