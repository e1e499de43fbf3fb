from .razorpay_client import (
    RazorpayAuthError,
    RazorpayClient,
    RazorpayConnectionError,
    RazorpayError,
    RazorpayTimeoutError,
    RazorpayValidationError,
)

__all__ = [
    "RazorpayAuthError",
    "RazorpayClient",
    "RazorpayConnectionError",
    "RazorpayError",
    "RazorpayTimeoutError",
    "RazorpayValidationError",
]
