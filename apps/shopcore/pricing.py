"""
Pricing Resolver - server-trusted prices for cart lines

This module implements:
1. PricingPolicy: markup and rounding rules as an explicit value object
2. CartLine / PricedLine / PricedCart: input and output of resolution
3. PricingResolver: snapshot unit price and cost per line, never trusting the client
"""
import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from django.conf import settings

from apps.core.exceptions import InsufficientStockException, ValidationException
from apps.core.utils import CENTS, to_money
from .catalog import ProductCatalog
from .models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingPolicy:
    """
    How a storefront price is derived from a supplier cost.

    markup_mode: 'percent_markup' (markup_value is a percentage) or
                 'fixed_amount' (markup_value is added to the cost)
    rounding:    'to_10' rounds up to the next multiple of 10,
                 'cents' rounds half-up to 2 decimal places
    """
    MODES = ('percent_markup', 'fixed_amount')
    ROUNDINGS = ('to_10', 'cents')

    markup_mode: str = 'percent_markup'
    markup_value: Decimal = Decimal('15')
    rounding: str = 'to_10'

    def __post_init__(self):
        if self.markup_mode not in self.MODES:
            raise ValueError(f"Unknown markup mode: {self.markup_mode}")
        if self.rounding not in self.ROUNDINGS:
            raise ValueError(f"Unknown rounding rule: {self.rounding}")

    @classmethod
    def from_settings(cls, config: Optional[Dict] = None) -> "PricingPolicy":
        config = config if config is not None else getattr(settings, 'PRICING_POLICY', {})
        return cls(
            markup_mode=config.get('MODE', 'percent_markup'),
            markup_value=Decimal(str(config.get('VALUE', '15'))),
            rounding=config.get('ROUNDING', 'to_10'),
        )

    def sell_price_for(self, cost: Decimal) -> Decimal:
        """Storefront price for a given cost; zero for a non-positive cost."""
        if cost is None or cost <= 0:
            return Decimal('0.00')
        if self.markup_mode == 'percent_markup':
            price = cost * (1 + self.markup_value / 100)
        else:
            price = cost + self.markup_value
        return self.round(price)

    def round(self, price: Decimal) -> Decimal:
        if self.rounding == 'to_10':
            return Decimal(math.ceil(price / 10) * 10).quantize(CENTS)
        return to_money(price)


@dataclass(frozen=True)
class CartLine:
    """One line as submitted by the client (prices are never accepted)."""
    product_id: str
    quantity: int
    color: str = ''
    size: str = ''

    @classmethod
    def from_dict(cls, data: Dict) -> "CartLine":
        if not isinstance(data, dict):
            raise ValidationException("Each order item must be an object.", field='items')
        product_id = data.get('product_id') or data.get('product')
        if not product_id:
            raise ValidationException("Product ID is missing from one or more items.", field='items')
        try:
            quantity = int(data.get('quantity', 0))
        except (TypeError, ValueError):
            raise ValidationException(f"Invalid quantity for product {product_id}.", field='quantity')
        return cls(
            product_id=str(product_id),
            quantity=quantity,
            color=data.get('color') or '',
            size=data.get('size') or '',
        )


@dataclass(frozen=True)
class PricedLine:
    product: Product
    title: str
    quantity: int
    unit_price: Decimal
    unit_cost: Decimal
    color: str = ''
    size: str = ''

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def line_cost(self) -> Decimal:
        return self.unit_cost * self.quantity


@dataclass
class PricedCart:
    lines: List[PricedLine] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal('0.00'))

    @property
    def total_cost(self) -> Decimal:
        return sum((line.line_cost for line in self.lines), Decimal('0.00'))


class PricingResolver:
    """
    Resolves authoritative unit price and cost for each cart line.
    Has no side effects: stock is only read here and decremented at commit.
    """

    def __init__(self, policy: PricingPolicy, catalog: Optional[ProductCatalog] = None):
        self.policy = policy
        self.catalog = catalog or ProductCatalog()

    def unit_price(self, product: Product) -> Decimal:
        """Sale price if set and positive, else regular price, else policy price from cost."""
        listed = product.listed_price
        if listed is not None and listed > 0:
            return to_money(listed)
        return self.policy.sell_price_for(product.buy_price)

    def resolve(self, lines: Sequence[CartLine]) -> PricedCart:
        cart = PricedCart()
        for line in lines:
            if line.quantity < 1:
                raise ValidationException(
                    f"Quantity for product {line.product_id} must be at least 1.", field='quantity'
                )
            product = self.catalog.find_product(line.product_id)
            if line.quantity > product.stock_quantity:
                raise InsufficientStockException(product.title, line.quantity, product.stock_quantity)

            price = self.unit_price(product)
            if price <= 0:
                logger.error(f"Product {product.id} resolved to non-positive price {price}")
                raise ValidationException(f"Product {product.title} is not available for sale.", field='items')

            cart.lines.append(PricedLine(
                product=product,
                title=product.title,
                quantity=line.quantity,
                unit_price=price,
                unit_cost=to_money(product.buy_price),
                color=line.color,
                size=line.size,
            ))
        return cart
