"""
Orders Infrastructure Services

Adapters for the payment gateway and webhook deduplication.
"""

from .razorpay_gateway import RazorpayGateway, hmac_sha256_hex
from .webhook_deduplicator import RedisWebhookDeduplicator

__all__ = [
    "RazorpayGateway",
    "RedisWebhookDeduplicator",
    "hmac_sha256_hex",
]
