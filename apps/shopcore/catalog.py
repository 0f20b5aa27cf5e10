"""
Catalog Store access used by the order machine.

Reads go through ``find_product``; the only writes are the conditional
stock decrement at order commit and the restore on cancellation.
"""
import logging

from django.core.exceptions import ValidationError
from django.db.models import F

from apps.core.exceptions import CustomerNotFoundException, ProductNotFoundException
from .models import Customer, Product

logger = logging.getLogger(__name__)


class ProductCatalog:
    """
    Thin store over the Product table.
    """

    def find_product(self, product_id) -> Product:
        """Return an orderable product or raise ProductNotFound."""
        try:
            product = Product.objects.get(pk=product_id)
        except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
            raise ProductNotFoundException(product_id)
        if not product.is_orderable:
            logger.info(f"Product {product_id} is {product.status} (deleted={product.is_deleted}), refusing order")
            raise ProductNotFoundException(product_id)
        return product

    def decrement_stock_if_available(self, product_id, quantity: int) -> bool:
        """
        Atomically take ``quantity`` units; False when stock is short.
        Must run inside the order-creation transaction.
        """
        updated = Product.objects.filter(
            pk=product_id,
            stock_quantity__gte=quantity,
            is_deleted=False,
            status=Product.Status.ACTIVE,
        ).update(stock_quantity=F('stock_quantity') - quantity)
        return updated == 1

    def restore_stock(self, product_id, quantity: int) -> None:
        Product.objects.filter(pk=product_id).update(stock_quantity=F('stock_quantity') + quantity)
        logger.info(f"Restored {quantity} unit(s) of product {product_id}")


def find_customer(customer_id) -> Customer:
    try:
        return Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, ValidationError, ValueError, TypeError):
        raise CustomerNotFoundException(customer_id)
