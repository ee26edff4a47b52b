"""
Seed script -- creates the tables and populates sample data for reviewers.

Run with:
    python seed.py

Creates:
  - 6 sample users (customers, pharmacy staff, couriers)
  - 4 sample pharmacies around central Mumbai
  - 8 sample medicines, several sharing a salt composition
  - inventory for every pharmacy
  - 3 sample orders with items, deliveries in different phases
  - 1 pending prescription
"""

import asyncio
from datetime import timedelta

from sqlalchemy import func, select

from src.domain.enums import (
    DeliveryStatus,
    MedicineCategory,
    OrderStatus,
    UserRole,
)
from src.domain.pricing import discounted_price
from src.domain.timeutils import utcnow
from src.infrastructure.database import Base, async_session_factory, engine
from src.infrastructure.models import (
    DeliveryModel,
    InventoryModel,
    MedicineModel,
    OrderItemModel,
    OrderModel,
    PharmacyModel,
    PrescriptionModel,
    UserModel,
)

USERS = [
    {"name": "Aarav Sharma", "email": "aarav@example.com", "phone": "+91 98200 00001",
     "role": UserRole.CUSTOMER, "address": "Bandra West, Mumbai",
     "latitude": 19.0596, "longitude": 72.8295},
    {"name": "Priya Patel", "email": "priya@example.com", "phone": "+91 98200 00002",
     "role": UserRole.CUSTOMER, "address": "Andheri East, Mumbai",
     "latitude": 19.1136, "longitude": 72.8697},
    {"name": "Rohan Mehta", "email": "rohan@example.com", "phone": "+91 98200 00003",
     "role": UserRole.PHARMACY},
    {"name": "Sneha Gupta", "email": "sneha@example.com", "phone": "+91 98200 00004",
     "role": UserRole.PHARMACY},
    {"name": "Vikram Singh", "email": "vikram@example.com", "phone": "+91 98200 00005",
     "role": UserRole.DELIVERY},
    {"name": "Meera Nair", "email": "meera@example.com", "phone": "+91 98200 00006",
     "role": UserRole.DELIVERY},
]

PHARMACIES = [
    {"pharmacy_name": "Bandra Wellness Pharmacy", "license_number": "MH-PH-1001",
     "address": "Hill Road, Bandra West", "latitude": 19.0544, "longitude": 72.8340,
     "rating": 4.6, "owner": 2},
    {"pharmacy_name": "Andheri Health Mart", "license_number": "MH-PH-1002",
     "address": "Chakala, Andheri East", "latitude": 19.1110, "longitude": 72.8650,
     "rating": 4.2, "owner": 3},
    {"pharmacy_name": "Dadar Medicals", "license_number": "MH-PH-1003",
     "address": "Ranade Road, Dadar West", "latitude": 19.0190, "longitude": 72.8430,
     "rating": 4.8, "owner": None},
    {"pharmacy_name": "Powai Care Chemist", "license_number": "MH-PH-1004",
     "address": "Hiranandani Gardens, Powai", "latitude": 19.1176, "longitude": 72.9060,
     "rating": 3.9, "owner": None},
]

MEDICINES = [
    {"name": "Crocin Advance", "brand": "GSK", "salt_composition": "Paracetamol 500mg",
     "category": MedicineCategory.OTC, "unit": "strip of 15", "price": 30.0},
    {"name": "Dolo 650", "brand": "Micro Labs", "salt_composition": "Paracetamol 650mg",
     "category": MedicineCategory.OTC, "unit": "strip of 15", "price": 32.0},
    {"name": "Calpol 500", "brand": "GSK", "salt_composition": "Paracetamol 500mg",
     "category": MedicineCategory.OTC, "unit": "strip of 15", "price": 25.0},
    {"name": "Augmentin 625 Duo", "brand": "GSK",
     "salt_composition": "Amoxicillin 500mg + Clavulanic Acid 125mg",
     "category": MedicineCategory.PRESCRIPTION, "unit": "strip of 10",
     "price": 223.0, "requires_prescription": True},
    {"name": "Moxikind-CV 625", "brand": "Mankind",
     "salt_composition": "Amoxicillin 500mg + Clavulanic Acid 125mg",
     "category": MedicineCategory.PRESCRIPTION, "unit": "strip of 10",
     "price": 179.0, "requires_prescription": True},
    {"name": "Becosules", "brand": "Pfizer", "salt_composition": "Vitamin B Complex",
     "category": MedicineCategory.SUPPLEMENT, "unit": "strip of 20", "price": 48.0},
    {"name": "Digital Thermometer", "brand": "Omron", "salt_composition": "N/A",
     "category": MedicineCategory.DEVICE, "unit": "piece", "price": 250.0},
    {"name": "Band-Aid Washproof", "brand": "Johnson & Johnson",
     "salt_composition": "N/A", "category": MedicineCategory.FIRST_AID,
     "unit": "pack of 20", "price": 60.0},
]


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(UserModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        users = [UserModel(**u) for u in USERS]
        session.add_all(users)
        await session.flush()
        print(f"  Created {len(users)} users")

        # ── Pharmacies ────────────────────────────────────────────────
        pharmacies = []
        for p in PHARMACIES:
            data = {k: v for k, v in p.items() if k != "owner"}
            owner = p["owner"]
            pharmacies.append(
                PharmacyModel(
                    **data,
                    user_id=users[owner].id if owner is not None else None,
                    phone="+91 22 2600 0000",
                    email=f"{data['license_number'].lower()}@pharmacies.example.com",
                    opening_time="08:00",
                    closing_time="22:00",
                )
            )
        session.add_all(pharmacies)
        await session.flush()
        print(f"  Created {len(pharmacies)} pharmacies")

        # ── Medicines ─────────────────────────────────────────────────
        medicines = [MedicineModel(**m) for m in MEDICINES]
        session.add_all(medicines)
        await session.flush()
        print(f"  Created {len(medicines)} medicines")

        # ── Inventory (every pharmacy stocks most of the catalogue) ──
        stock_rows = 0
        for p_idx, pharmacy in enumerate(pharmacies):
            for m_idx, medicine in enumerate(medicines):
                if (p_idx + m_idx) % 4 == 3:
                    continue
                session.add(
                    InventoryModel(
                        pharmacy_id=pharmacy.id,
                        medicine_id=medicine.id,
                        quantity=10 * (m_idx + 1) if p_idx != 3 else 0,
                        price=medicine.price,
                        discount_percentage=float(5 * p_idx),
                        is_available=True,
                    )
                )
                stock_rows += 1
        await session.flush()
        print(f"  Created {stock_rows} inventory rows")

        # ── Orders, items and deliveries ──────────────────────────────
        now = utcnow()
        orders_data = [
            {"order_number": "ORD-0001", "user": 0, "pharmacy": 0,
             "status": OrderStatus.OUT_FOR_DELIVERY, "items": [(0, 2), (5, 1)],
             "delivery": DeliveryStatus.ON_THE_WAY, "courier": 4,
             "position": (19.0570, 72.8315), "picked_up_minutes_ago": 6},
            {"order_number": "ORD-0002", "user": 1, "pharmacy": 1,
             "status": OrderStatus.CONFIRMED, "items": [(3, 1)],
             "delivery": DeliveryStatus.ASSIGNED, "courier": 5,
             "position": None, "picked_up_minutes_ago": None},
            {"order_number": "ORD-0003", "user": 0, "pharmacy": 2,
             "status": OrderStatus.DELIVERED, "items": [(6, 1), (7, 2)],
             "delivery": DeliveryStatus.DELIVERED, "courier": 4,
             "position": None, "picked_up_minutes_ago": 90},
        ]

        for o in orders_data:
            customer = users[o["user"]]
            pharmacy = pharmacies[o["pharmacy"]]
            order = OrderModel(
                user_id=customer.id,
                pharmacy_id=pharmacy.id,
                order_number=o["order_number"],
                status=o["status"],
                total_amount=0.0,
                delivery_fee=2.0,
                delivery_address=customer.address,
                delivery_latitude=customer.latitude,
                delivery_longitude=customer.longitude,
                prescription_required=any(
                    medicines[m].requires_prescription for m, _ in o["items"]
                ),
            )
            session.add(order)
            await session.flush()

            total = 0.0
            for m_idx, qty in o["items"]:
                medicine = medicines[m_idx]
                unit_price = discounted_price(medicine.price, 5 * o["pharmacy"])
                subtotal = round(unit_price * qty, 2)
                total += subtotal
                session.add(
                    OrderItemModel(
                        order_id=order.id,
                        medicine_id=medicine.id,
                        quantity=qty,
                        price=medicine.price,
                        discount=round(medicine.price - unit_price, 2),
                        subtotal=subtotal,
                    )
                )
            order.total_amount = round(total + order.delivery_fee, 2)

            picked_up_at = None
            if o["picked_up_minutes_ago"] is not None:
                picked_up_at = now - timedelta(minutes=o["picked_up_minutes_ago"])
            position = o["position"] or (None, None)
            session.add(
                DeliveryModel(
                    order_id=order.id,
                    delivery_person_id=users[o["courier"]].id,
                    status=o["delivery"],
                    current_latitude=position[0],
                    current_longitude=position[1],
                    assigned_at=now - timedelta(minutes=120),
                    picked_up_at=picked_up_at,
                    delivered_at=(
                        now - timedelta(minutes=60)
                        if o["delivery"] == DeliveryStatus.DELIVERED
                        else None
                    ),
                )
            )
        await session.flush()
        print(f"  Created {len(orders_data)} orders with deliveries")

        # ── Prescriptions ─────────────────────────────────────────────
        session.add(
            PrescriptionModel(
                user_id=users[1].id,
                prescription_url="https://files.example.com/rx/priya-0002.jpg",
            )
        )
        print("  Created 1 prescription")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Creating tables...")
    await create_tables()
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
