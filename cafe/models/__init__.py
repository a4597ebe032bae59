# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    # Enums
    OfferType, TaxCalculationMethod, MenuCategory, PriceType,
    OrderSource, OrderStatus, PaymentStatus, PaymentMethod,

    # Identity
    Admin,

    # Billing settings / offers
    BillingSettings, DailyOffer,

    # Menu & customers
    MenuItem, Customer,

    # Orders
    Order, OrderItem, OrderCounter,

    # Audit
    AuditLog,
)

__all__ = [
    # Enums
    "OfferType", "TaxCalculationMethod", "MenuCategory", "PriceType",
    "OrderSource", "OrderStatus", "PaymentStatus", "PaymentMethod",

    # Identity
    "Admin",

    # Billing settings / offers
    "BillingSettings", "DailyOffer",

    # Menu & customers
    "MenuItem", "Customer",

    # Orders
    "Order", "OrderItem", "OrderCounter",

    # Audit
    "AuditLog",
]
