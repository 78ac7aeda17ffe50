from dotenv import load_dotenv


# ======================================================
# ENV
# ======================================================

# DATABASE_URL / REDIS_URL must be in the environment before grooming.config loads
load_dotenv()

from grooming.database import SessionLocal, init_db  # noqa: E402
from grooming.models.generated import (  # noqa: E402
    Services as DBServices,
    Shops as DBShops,
)


DEMO_SLUG = "gangnam"

DEMO_SHOP = {
    "name": "정리하개 강남점",
    "slug": DEMO_SLUG,
    "phone": "02-123-4567",
    "address": "서울 강남구 테헤란로 123",
    "business_hours": "09:00-18:00",
    "deposit_amount": 10000,
    "deposit_required": 1,
    "is_approved": 1,
}

DEMO_SERVICES = [
    ("전체미용", 120, 50000),
    ("부분미용", 60, 30000),
    ("목욕", 60, 20000),
]


# ======================================================
# SEED
# ======================================================

def seed_demo_shop(db) -> DBShops:
    """Create (or approve) the demo shop and its services. Idempotent."""
    shop = db.query(DBShops).filter(DBShops.slug == DEMO_SLUG).first()
    if shop:
        print(f"ℹ️ Demo shop already exists (id={shop.id})")
        shop.is_approved = 1
    else:
        shop = DBShops(**DEMO_SHOP)
        db.add(shop)
        db.flush()
        print(f"✅ Demo shop created (id={shop.id}, slug={shop.slug})")

    has_services = db.query(DBServices).filter(DBServices.shop_id == shop.id).first()
    if not has_services:
        for name, duration, price in DEMO_SERVICES:
            db.add(DBServices(shop_id=shop.id, name=name, duration=duration, price=price))
        print(f"✅ {len(DEMO_SERVICES)} demo services created")

    db.commit()
    db.refresh(shop)
    return shop


# ======================================================
# MAIN
# ======================================================

def main():
    init_db()
    db = SessionLocal()
    try:
        seed_demo_shop(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
