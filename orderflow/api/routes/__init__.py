from . import razorpay_webhook

__all__ = ["razorpay_webhook"]
