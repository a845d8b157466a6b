"""Use cases for the exchange bounded context."""
