# storefront/data/seed.py
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal, init_db
from storefront.data.models.coupon import CouponModel
from storefront.data.models.product import ProductModel
from storefront.domain.pricing import utcnow
from storefront.repos.coupon_repo import CouponRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# (legacy id, nazwa, opis, cena, kategoria, wege, odznaki, wyrozniony)
MENU = [
    (1, "Edamame", "Steamed soybeans with sea salt", "6.99", "starters", True, [], False),
    (2, "Gyoza", "Pan-fried pork dumplings", "8.99", "starters", False, ["Bestseller"], True),
    (3, "Spring Rolls", "Crispy vegetable spring rolls", "7.99", "starters", True, [], False),
    (4, "Chicken Karaage", "Japanese fried chicken", "9.99", "starters", False, ["Bestseller"], False),
    (5, "Tonkotsu Ramen", "Rich pork bone broth with chashu", "14.99", "ramen", False, ["Bestseller"], True),
    (6, "Miso Ramen", "Miso broth with corn and butter", "13.99", "ramen", False, [], False),
    (7, "Shoyu Ramen", "Soy sauce broth with bamboo shoots", "13.99", "ramen", False, [], False),
    (8, "Vegetarian Ramen", "Vegetable broth with tofu", "12.99", "ramen", True, [], False),
    (9, "Salmon Sashimi", "Fresh salmon slices", "16.99", "sushi", False, ["Bestseller"], True),
    (10, "Dragon Roll", "Eel and avocado roll", "15.99", "sushi", False, [], False),
    (11, "California Roll", "Crab, avocado and cucumber", "10.99", "sushi", False, [], False),
    (12, "Vegetable Roll", "Seasonal vegetables", "8.99", "sushi", True, [], False),
    (13, "Teriyaki Chicken Bowl", "Grilled chicken with teriyaki glaze", "13.99", "rice-bowls", False, ["Bestseller"], True),
    (14, "Beef Bulgogi Bowl", "Marinated beef over rice", "14.99", "rice-bowls", False, [], False),
    (15, "Tofu Teriyaki Bowl", "Crispy tofu with teriyaki glaze", "11.99", "rice-bowls", True, [], False),
    (16, "Mochi Ice Cream", "Assorted mochi", "7.99", "desserts", True, [], False),
    (17, "Matcha Tiramisu", "Tiramisu with matcha cream", "8.99", "desserts", True, ["Bestseller"], False),
    (18, "Dorayaki", "Pancakes with red bean filling", "6.99", "desserts", True, [], False),
    (19, "Matcha Latte", "Ceremonial matcha with milk", "5.99", "drinks", True, [], False),
    (20, "Yuzu Lemonade", "Sparkling yuzu lemonade", "4.99", "drinks", True, [], False),
    (21, "Sake", "Junmai sake, 180ml", "12.99", "drinks", True, [], False),
]

# (kod, opis, typ, wartosc, min. kwota, max rabat, dni waznosci, limit, dla kogo)
COUPONS = [
    ("WELCOME10", "Welcome discount for new customers", "percentage", "10", "0", "50", 90, 1000, "new_users"),
    ("SAVE20", "Save 20% on orders above 30", "percentage", "20", "30", "100", 60, 500, "all"),
    ("FLAT50", "Flat 50 off on orders above 100", "fixed", "50", "100", None, 30, 200, "all"),
    ("EAST15", "15% off on all orders", "percentage", "15", "25", "75", 45, 1000, "all"),
]


def seed_products(db: Session) -> int:
    repo = ProductRepo(db)
    created = 0
    for legacy_id, name, description, price, category, is_veg, badges, featured in MENU:
        if repo.get_by_legacy_id(legacy_id):
            continue
        repo.add_product(
            ProductModel(
                legacy_id=legacy_id,
                name=name,
                description=description,
                price=Decimal(price),
                image=f"/assets/image/{(legacy_id - 1) % 8 + 1}.png",
                category=category,
                is_veg=is_veg,
                badges=badges,
                featured=featured,
                available=True,
            )
        )
        created += 1
    return created


def seed_coupons(db: Session) -> int:
    repo = CouponRepo(db)
    now = utcnow()
    created = 0
    for code, description, kind, value, min_amount, max_discount, days, limit, audience in COUPONS:
        if repo.get_by_code(code):
            logger.info(f"Coupon {code} already exists, skipping")
            continue
        repo.create_coupon(
            CouponModel(
                code=code,
                description=description,
                discount_type=kind,
                discount_value=Decimal(value),
                min_amount=Decimal(min_amount),
                max_discount=Decimal(max_discount) if max_discount else None,
                valid_from=now,
                valid_until=now + timedelta(days=days),
                usage_limit=limit,
                used_count=0,
                is_active=True,
                applicable_to=audience,
            )
        )
        created += 1
    return created


def seed():
    init_db()
    db = SessionLocal()
    try:
        # nie nadpisujemy: dodajemy tylko brakujace rekordy
        products = seed_products(db)
        coupons = seed_coupons(db)
        logger.info(f"Seed finished: {products} products, {coupons} coupons")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
