"""Fee revenue and market reporting for a central-limit-order-book exchange."""

__version__ = "0.1.0"
