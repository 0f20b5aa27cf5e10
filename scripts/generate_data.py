"""
Demo Data Generator for the NexCart commerce backend

This script seeds customers and a product catalog, then places orders
through the same service operations the API uses, and walks a share of
them through payment verification and shipping.
"""
import os
import sys
import uuid
import random
from decimal import Decimal

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.base')
os.environ.setdefault('EMAIL_BACKEND', 'django.core.mail.backends.dummy.EmailBackend')

import django
django.setup()

from django.contrib.auth import get_user_model
from faker import Faker

from apps.backoffice.gateway import AdminGateway
from apps.core.capabilities import AuthenticatedAdmin
from apps.payguard import services as payments
from apps.payguard.models import Payment, PaymentMethod, PaymentStatus
from apps.shipstream import services as shipping
from apps.shipstream.models import ShippingUpdate
from apps.shopcore import ledger
from apps.shopcore.models import Customer, Order, OrderItem, OrderStatus, Product
from apps.shopcore.pricing import PricingPolicy, PricingResolver

fake = Faker()

DELIVERY_CHARGES = [Decimal('60.00'), Decimal('120.00')]
SHIPPING_PATH = [OrderStatus.PACKAGING, OrderStatus.SHIPPED, OrderStatus.IN_TRANSIT,
                 OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED]


def generate_customers(count=30):
    """Generate customers, each with a login account."""
    print(f"Generating {count} customers...")
    User = get_user_model()
    customers = []

    for _ in range(count):
        email = fake.unique.email()
        account = User.objects.create_user(username=email, email=email, password='demo-pass-123')
        customer = Customer.objects.create(
            name=fake.name(),
            email=email,
            phone=fake.numerify('017########'),
            address=fake.address(),
            account=account,
        )
        customers.append(customer)

    print(f"Created {len(customers)} customers")
    return customers


def generate_products(count=60):
    """Generate catalog products; some carry no sell price and are priced by policy."""
    print(f"Generating {count} products...")

    product_templates = [
        ('Wireless Headphones', 'electronics', 900, 2500),
        ('Smart Watch', 'electronics', 1500, 6000),
        ('Power Bank', 'electronics', 600, 1800),
        ('Bluetooth Speaker', 'electronics', 700, 2200),
        ('Cotton T-Shirt', 'clothing', 250, 600),
        ('Denim Jeans', 'clothing', 700, 1600),
        ('Panjabi', 'clothing', 900, 2500),
        ('Running Shoes', 'sports', 1200, 3500),
        ('Yoga Mat', 'sports', 350, 900),
        ('Rice Cooker', 'home', 1500, 3500),
        ('Blender', 'home', 1200, 3000),
        ('Face Wash', 'beauty', 150, 450),
        ('Board Game', 'toys', 400, 1200),
    ]

    products = []
    while len(products) < count:
        name_base, category, min_cost, max_cost = random.choice(product_templates)
        variation = random.choice(['Pro', 'Lite', 'Plus', 'Max', 'Mini', ''])
        buy_price = Decimal(random.randint(min_cost, max_cost)).quantize(Decimal('0.01'))

        # Roughly a third are supplier items without a sell price
        price = None
        sale_price = None
        if random.random() > 0.33:
            price = (buy_price * Decimal(random.choice(['1.2', '1.3', '1.5']))).quantize(Decimal('1'))
            if random.random() > 0.75:
                sale_price = (price * Decimal('0.9')).quantize(Decimal('1'))

        product = Product.objects.create(
            title=f"{name_base} {variation}".strip(),
            category=category,
            description=fake.paragraph(nb_sentences=3),
            buy_price=buy_price,
            price=price,
            sale_price=sale_price,
            stock_quantity=random.randint(5, 200),
            sku=f"SKU-{uuid.uuid4().hex[:8].upper()}",
            colors=random.choice([[], ['Black', 'White'], ['Red', 'Blue', 'Green']]),
            sizes=random.choice([[], ['S', 'M', 'L', 'XL']]),
        )
        products.append(product)

    print(f"Created {len(products)} products")
    return products


def _address(customer):
    return {
        'full_name': customer.name,
        'phone': customer.phone,
        'address': fake.street_address(),
        'city': random.choice(['Dhaka', 'Chattogram', 'Sylhet', 'Khulna', 'Rajshahi']),
        'zip_code': fake.postcode(),
    }


def generate_orders(customers, products, count=120):
    """Place orders through the ledger so every invariant is exercised."""
    print(f"Generating {count} orders...")
    resolver = PricingResolver(PricingPolicy.from_settings())
    orders = []
    failures = 0

    for _ in range(count):
        customer = random.choice(customers)
        picked = random.sample(products, random.randint(1, 3))
        lines = [{'product_id': str(p.id), 'quantity': random.randint(1, 3)} for p in picked]
        delivery_charge = random.choice(DELIVERY_CHARGES)
        method = random.choices(
            [PaymentMethod.BKASH, PaymentMethod.NAGAD, PaymentMethod.ROCKET,
             PaymentMethod.BANK_TRANSFER, PaymentMethod.CASH_ON_DELIVERY],
            weights=[35, 20, 10, 5, 30]
        )[0]

        # Compute the declared amount the way a storefront would, from catalog prices
        subtotal = sum(
            (resolver.unit_price(Product.objects.get(pk=line['product_id'])) * line['quantity']
             for line in lines),
            Decimal('0.00')
        )
        transaction_id = None
        if method != PaymentMethod.CASH_ON_DELIVERY and random.random() > 0.2:
            transaction_id = fake.unique.bothify('??#?#?##?#').upper()

        result = ledger.create_order(
            customer_id=customer.id,
            lines=lines,
            shipping_address=_address(customer),
            delivery_charge=delivery_charge,
            payment_method=method,
            declared_amount=subtotal + delivery_charge,
            transaction_id=transaction_id,
            sender_number=customer.phone if transaction_id else None,
            delivery_cost=delivery_charge - Decimal('10.00'),
            resolver=resolver,
        )
        if result.ok:
            orders.append(result.value)
        else:
            failures += 1

    print(f"Created {len(orders)} orders ({failures} rejected, e.g. stock ran out)")
    return orders


def advance_orders(orders, gateway):
    """Verify, reject, ship and cancel a share of the seeded orders."""
    print("Advancing orders through payment and shipping...")
    verified = rejected = shipped = cancelled = 0

    for order in orders:
        order.refresh_from_db()
        payment = Payment.objects.get(order=order)

        if payment.status == PaymentStatus.PENDING and random.random() > 0.5:
            payments.submit_payment(order.order_id, fake.unique.bothify('??#?#?##?#').upper(),
                                    customer_id=order.customer_id)
            payment.refresh_from_db()

        if payment.status == PaymentStatus.SUBMITTED:
            roll = random.random()
            if roll > 0.3:
                if gateway.verify_payment(order.order_id).ok:
                    verified += 1
            elif roll > 0.2:
                if gateway.reject_payment(order.order_id, 'Transaction ID not found in statement.').ok:
                    rejected += 1
                continue

        order.refresh_from_db()
        if order.order_status == OrderStatus.PROCESSING and random.random() > 0.3:
            for next_status in SHIPPING_PATH[:random.randint(1, len(SHIPPING_PATH))]:
                if not gateway.update_shipping_status(order.order_id, next_status).ok:
                    break
            shipped += 1
        elif random.random() > 0.9:
            if shipping.cancel_order(order.order_id, order.customer_id).ok:
                cancelled += 1

    print(f"Verified {verified}, rejected {rejected}, shipped {shipped}, cancelled {cancelled}")


def clear_all_data():
    """Clear all existing data."""
    print("Clearing existing data...")

    ShippingUpdate.objects.all().delete()
    Payment.objects.all().delete()
    OrderItem.objects.all().delete()
    Order.objects.all().delete()
    Product.objects.all().delete()
    Customer.objects.all().delete()
    get_user_model().objects.filter(is_staff=False, is_superuser=False).delete()

    print("All data cleared")


def main():
    """Main function to generate all data."""
    print("\n" + "="*60)
    print("NexCart Demo Data Generator")
    print("="*60 + "\n")

    clear_all_data()

    gateway = AdminGateway(AuthenticatedAdmin(identifier='seed-script', email='seed@nexcart.local'))

    customers = generate_customers(30)
    products = generate_products(60)
    orders = generate_orders(customers, products, 120)
    advance_orders(orders, gateway)

    summary = gateway.dashboard().unwrap()
    sales = summary['sales']

    print("\n" + "="*60)
    print("Data Generation Complete!")
    print("="*60)
    print(f"\nSummary:")
    print(f"  - Customers: {len(customers)}")
    print(f"  - Products: {len(products)}")
    print(f"  - Orders: {len(orders)}")
    print(f"  - Verified sales: {sales['total_sell']} (profit {sales['total_profit']}, {sales['profit_percent']}%)")
    print()


if __name__ == '__main__':
    main()
