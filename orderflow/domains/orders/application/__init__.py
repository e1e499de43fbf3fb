"""
Orders Application Layer

Use cases, ports and DTOs.
"""
