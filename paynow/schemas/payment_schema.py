from marshmallow import EXCLUDE, Schema, fields, post_load, validates, ValidationError

from paynow.models.payment import LineItem, PaymentRequest


class LineItemSchema(Schema):
    """Line item schema"""
    name = fields.Str(required=True)
    amount = fields.Decimal(required=True)
    quantity = fields.Int(load_default=1, strict=True)

    @validates('amount')
    def validate_amount(self, value, **kwargs):
        if value <= 0:
            raise ValidationError('Amount must be greater than 0')

    @validates('quantity')
    def validate_quantity(self, value, **kwargs):
        if value < 1:
            raise ValidationError('Quantity must be at least 1')

    @post_load
    def make_item(self, data, **kwargs):
        return LineItem(**data)


class PaymentRequestSchema(Schema):
    """Payment request schema, for callers holding request data as dicts"""
    reference = fields.Str(required=True)
    amount = fields.Decimal(required=True)
    currency = fields.Str(load_default='USD')
    result_url = fields.Url(required=True, require_tld=False)
    return_url = fields.Url(load_default=None, require_tld=False)
    customer_email = fields.Email(load_default=None)
    items = fields.List(fields.Nested(LineItemSchema), load_default=list)
    additional_info = fields.Str(load_default=None)
    merchant_trace = fields.Str(load_default=None)
    tokenize = fields.Bool(load_default=None)

    @validates('amount')
    def validate_amount(self, value, **kwargs):
        if value <= 0:
            raise ValidationError('Amount must be greater than 0')

    @post_load
    def make_request(self, data, **kwargs):
        return PaymentRequest(**data)


class GatewayResponseSchema(Schema):
    """Types the verified fields of a Paynow response"""

    class Meta:
        unknown = EXCLUDE

    status = fields.Str(required=True)
    reference = fields.Str(load_default=None)
    paynow_reference = fields.Int(data_key='paynowreference', load_default=None)
    amount = fields.Decimal(load_default=None)
    poll_url = fields.Str(data_key='pollurl', load_default=None)
    browser_url = fields.Str(data_key='browserurl', load_default=None)
    instructions = fields.Str(load_default=None)
    token = fields.Str(load_default=None)
    token_expiry = fields.Date(format='%d%b%Y', data_key='tokenexpiry', load_default=None)
    error = fields.Str(load_default=None)
