"""
Common Error Constants

Centralized error messages shared by the API client and cart actions.
"""

# Generic errors
ERROR_GENERIC = "An error occurred"
ERROR_NETWORK = "Network error"
ERROR_RATE_LIMITED = "Too many requests"
ERROR_INVALID_RESPONSE = "Invalid response from server"

# Cart errors
ERROR_ADD_TO_CART_FAILED = "Failed to add to cart"
ERROR_UPDATE_CART_FAILED = "Error updating cart"
ERROR_REMOVE_ITEM_FAILED = "Error removing item"
ERROR_LOAD_CART_FAILED = "Error loading cart"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"
ERROR_OUT_OF_STOCK = "Out of Stock"
ERROR_EMPTY_CART = "Cart is empty"

# Order errors
ERROR_PLACE_ORDER_FAILED = "Failed to place order"

# Auth errors
ERROR_AUTH_FAILED = "Authentication failed"


class StorageUnavailableError(Exception):
    """Raised by a key-value backend that cannot be read or written."""
