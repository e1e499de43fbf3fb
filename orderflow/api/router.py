"""
Main API router: every endpoint under the API prefix.
"""

from fastapi import APIRouter

from orderflow.api.routes import razorpay_webhook
from orderflow.domains.orders.api import cart_router, orders_router

api_router = APIRouter()

api_router.include_router(orders_router)
api_router.include_router(cart_router)
api_router.include_router(razorpay_webhook.router)
