"""
Orders Infrastructure Layer

Persistence and external service adapters for the orders domain.
"""
