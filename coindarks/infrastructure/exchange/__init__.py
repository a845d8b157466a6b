"""
Infrastructure adapters for the exchange bounded context.

Each adapter implements a domain port (ABC) and connects
to external systems: the relational store, CoinGecko, webhooks.
"""
