"""
Demo Data

Loads the sample shop shown on a fresh install: one user, a small catalog,
three promotions, four orders and a pending return. Everything goes through
the services, so the usual validation applies.
"""

from datetime import timedelta

import structlog

from backoffice.container import Backoffice

logger = structlog.get_logger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?ixlib=rb-1.2.1&auto=format&fit=crop&w=128&q=80"


def seed_sample_data(backoffice: Backoffice) -> int:
    """
    Populate an empty store with the demo shop.
    
    Returns:
        The demo user's id
    """
    now = backoffice.now()
    
    user = backoffice.users.create_user({
        "username": "demo",
        "name": "Tom Cook",
        "email": "tom@example.com",
        "avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=256&h=256&q=80",
    })
    owner_id = user.id
    catalog = backoffice.catalog
    
    footwear, apparel, electronics = [
        catalog.create_category(owner_id, data)
        for data in [
            {"name": "Footwear", "description": "All types of shoes", "image_url": _UNSPLASH.format("1542291026-7eec264c27ff")},
            {"name": "Apparel", "description": "Clothing items", "image_url": _UNSPLASH.format("1620799140408-edc6dcb6d633")},
            {"name": "Electronics", "description": "Electronic gadgets", "image_url": _UNSPLASH.format("1526170375885-4d8ecf77b99f")},
        ]
    ]
    
    headphones, watch, shoes, tshirt = [
        catalog.create_product(owner_id, data)
        for data in [
            {"name": "Premium Headphones", "description": "High quality headphones", "price": 159.0, "cost": 80.0,
             "stock": 25, "category_id": electronics.id, "image_url": _UNSPLASH.format("1555689502-c4b22d76c56f")},
            {"name": "Smart Watch", "description": "Latest smartwatch technology", "price": 249.0, "cost": 150.0,
             "stock": 15, "category_id": electronics.id, "image_url": _UNSPLASH.format("1546868871-7041f2a55e12")},
            {"name": "Running Shoes", "description": "Comfortable running shoes", "price": 120.0, "cost": 60.0,
             "stock": 30, "category_id": footwear.id, "image_url": _UNSPLASH.format("1542291026-7eec264c27ff")},
            {"name": "T-Shirt", "description": "Cotton t-shirt", "price": 25.0, "cost": 8.0,
             "stock": 100, "category_id": apparel.id, "image_url": _UNSPLASH.format("1521572163474-6864f9cf17ab")},
        ]
    ]
    
    new_arrival, bestseller, limited, sale = [
        catalog.create_tag(owner_id, {"name": name})
        for name in ["New Arrival", "Bestseller", "Limited Edition", "Sale"]
    ]
    catalog.add_tag_to_product(headphones.id, new_arrival.id)
    catalog.add_tag_to_product(watch.id, bestseller.id)
    catalog.add_tag_to_product(shoes.id, sale.id)
    catalog.add_tag_to_product(tshirt.id, limited.id)
    
    for data in [
        {"name": "Summer Sale", "description": "20% off all apparel", "type": "percentage", "value": 20,
         "start_date": now, "end_date": now + timedelta(days=7), "scope": "category", "scope_id": apparel.id},
        {"name": "New Customer", "description": "15% off first purchase", "type": "percentage", "value": 15,
         "scope": "all"},
        {"name": "Weekend Flash", "description": "30% off electronics", "type": "percentage", "value": 30,
         "start_date": now + timedelta(days=3), "end_date": now + timedelta(days=5),
         "scope": "category", "scope_id": electronics.id},
    ]:
        backoffice.discounts.create_discount(owner_id, data)
    
    def line(product, quantity=1):
        return {
            "product_id": product.id,
            "product_name": product.name,
            "price": product.price,
            "quantity": quantity,
            "total": product.price * quantity,
        }
    
    orders = backoffice.orders
    orders.create_order(owner_id, {
        "customer_name": "Sarah Johnson", "customer_email": "sarah@example.com", "customer_phone": "123-456-7890",
        "shipping_address": "123 Main St, City, State, 12345", "total": 159.99,
        "status": "completed", "payment_status": "paid", "escrow_status": "released",
    }, items=[line(headphones)])
    orders.create_order(owner_id, {
        "customer_name": "Michael Davis", "customer_email": "michael@example.com", "customer_phone": "234-567-8901",
        "shipping_address": "456 Oak St, City, State, 12345", "total": 89.99,
        "status": "shipped", "payment_status": "paid", "escrow_status": "pending",
        "tracking_number": "TRK123456", "shipping_carrier": "FedEx",
    }, items=[line(shoes)])
    orders.create_order(owner_id, {
        "customer_name": "Emily Wilson", "customer_email": "emily@example.com", "customer_phone": "345-678-9012",
        "shipping_address": "789 Pine St, City, State, 12345", "total": 129.99,
        "status": "processing", "payment_status": "paid", "escrow_status": "pending",
    }, items=[line(tshirt, quantity=2)])
    returned_order = orders.create_order(owner_id, {
        "customer_name": "James Brown", "customer_email": "james@example.com", "customer_phone": "456-789-0123",
        "shipping_address": "101 Elm St, City, State, 12345", "total": 299.99,
        "status": "delivered", "payment_status": "paid", "escrow_status": "pending",
        "tracking_number": "TRK789012", "shipping_carrier": "UPS",
    }, items=[line(watch), line(headphones)])
    
    returned_items = [orders.get_order_items(returned_order.id)[0].id]
    backoffice.returns.create_return({
        "order_id": returned_order.id,
        "reason": "Item not as described",
        "requested_items": returned_items,
        "refund_amount": backoffice.returns.calculate_refund_amount(returned_order.id, returned_items),
    })
    
    logger.info("Sample data loaded", owner_id=owner_id, **backoffice.store.counts())
    return owner_id
