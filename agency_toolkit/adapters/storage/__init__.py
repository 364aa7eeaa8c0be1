"""Storage adapters.

Abstract stores plus in-memory implementations, so the service can run and be
tested without a hosted database or blob service and later move to one
without changing the services or routes.
"""
