"""Cart pricing constants (cents / basis points)."""

FREE_DELIVERY_THRESHOLD_CENTS = 150_00

# Delivery fee table, by (subtotal below threshold?, any bulk item?)
BULK_UNDER_THRESHOLD_FEE_CENTS = 100_00
NORMAL_UNDER_THRESHOLD_FEE_CENTS = 50_00
BULK_OVER_THRESHOLD_FEE_CENTS = 50_00
NORMAL_OVER_THRESHOLD_FEE_CENTS = 0

# 8.25% sales tax, charged on the item subtotal only
TAX_RATE_BPS = 825
