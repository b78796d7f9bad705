# mocards/db/seed.py
import asyncio
import logging
import random
from faker import Faker
from tqdm import tqdm

from mocards.db.session import connect_db_pool, get_pool, close_db_pool
from mocards.core.security import hash_password
from mocards.repositories.admin_repo import AdminRepository
from mocards.repositories.batch_repo import BatchRepository
from mocards.repositories.card_repo import CardRepository
from mocards.repositories.card_transaction_repo import CardTransactionRepository
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.repositories.location_code_repo import LocationCodeRepository
from mocards.repositories.perk_repo import PerkRepository
from mocards.services.batch_service import BatchService
from mocards.services.card_service import CardService

fake = Faker("en_PH")

NUM_CLINICS = 10
NUM_BATCHES = 3
CARDS_PER_BATCH = 200
CARDS_PER_CLINIC = 25

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "mocards-admin"
CLINIC_PASSWORD = "mocards-clinic"

LOCATION_CODES = [
    ("MNL", "Manila"),
    ("CAV", "Cavite"),
    ("CEB", "Cebu"),
    ("DVO", "Davao"),
    ("ILO", "Iloilo"),
]


async def seed():
    await connect_db_pool()
    pool = await get_pool()
    if pool is None:
        raise RuntimeError("Database pool could not be initialized")

    async with pool.acquire() as conn:
        admin_repo = AdminRepository(conn)
        clinic_repo = ClinicRepository(conn)
        location_repo = LocationCodeRepository(conn)
        card_repo = CardRepository(conn)
        batch_repo = BatchRepository(conn)
        card_service = CardService(
            conn, card_repo, PerkRepository(conn), batch_repo, clinic_repo,
            location_repo, CardTransactionRepository(conn),
        )
        batch_service = BatchService(conn, batch_repo, card_repo, clinic_repo, card_service)

        logging.info("Creating admin account and location codes...")
        if await admin_repo.get_by_username(ADMIN_USERNAME) is None:
            await admin_repo.create({
                "username": ADMIN_USERNAME,
                "password_hash": hash_password(ADMIN_PASSWORD),
                "full_name": "MOCARDS Administrator",
            })
        for code, name in LOCATION_CODES:
            if await location_repo.get_active(code) is None:
                await location_repo.create(code, name)

        logging.info("Creating clinics...")
        clinic_ids = []
        for i in range(1, NUM_CLINICS + 1):
            clinic = await clinic_repo.create({
                "clinic_code": f"CLN{i:03d}{random.randint(100, 999)}",
                "clinic_name": f"{fake.last_name()} Dental Clinic",
                "contact_email": fake.unique.email(),
                "contact_phone": fake.phone_number(),
                "address": fake.address(),
                "password_hash": hash_password(CLINIC_PASSWORD),
            })
            clinic_ids.append(clinic["id"])

        logging.info("Generating card batches...")
        unassigned = []
        for _ in tqdm(range(NUM_BATCHES), desc="Generating batches"):
            code, _name = random.choice(LOCATION_CODES)
            result = await batch_service.create_batch(
                total_cards=CARDS_PER_BATCH,
                location_code=code,
                created_by=ADMIN_USERNAME,
                notes="Seed data",
            )
            unassigned.extend(card["id"] for card in result["cards"])

        for clinic_id in tqdm(clinic_ids, desc="Assigning cards"):
            chunk, unassigned = unassigned[:CARDS_PER_CLINIC], unassigned[CARDS_PER_CLINIC:]
            if not chunk:
                break
            await card_service.assign_cards_to_clinic(chunk, clinic_id, ADMIN_USERNAME)

        logging.info("Seed complete.")

    await close_db_pool()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
