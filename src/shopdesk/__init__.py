"""ShopDesk: data-access layer and back-office API for a retail/repair shop."""

__version__ = "0.1.0"
