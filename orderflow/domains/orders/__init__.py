"""
Orders Domain

Order lifecycle and payment settlement for the multi-vendor storefront.
"""
