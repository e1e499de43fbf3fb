"""
Core building blocks shared by every domain: base entities and exceptions,
application wiring and infrastructure clients.
"""
