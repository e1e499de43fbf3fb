"""
Orders Domain Layer

Entities, value objects and domain services for pricing, order creation,
payment settlement and the order status machine.
"""
