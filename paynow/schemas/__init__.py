from paynow.schemas.payment_schema import (
    LineItemSchema,
    PaymentRequestSchema,
    GatewayResponseSchema,
)

__all__ = [
    'LineItemSchema',
    'PaymentRequestSchema',
    'GatewayResponseSchema',
]
