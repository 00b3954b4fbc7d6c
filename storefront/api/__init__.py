"""Shop API package: request client and payload models."""
from .client import ApiClient
from .models import ApiResponse, RemoteCartData, RemoteCartItem, RemoteCartProduct, ShippingAddress

__all__ = [
    "ApiClient",
    "ApiResponse",
    "RemoteCartData",
    "RemoteCartItem",
    "RemoteCartProduct",
    "ShippingAddress",
]
