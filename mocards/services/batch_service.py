# mocards/services/batch_service.py

import logging
from typing import Optional

from asyncpg import Connection

from mocards.db.models.card_batch_model import BatchStatus
from mocards.db.models.card_model import CardStatus
from mocards.repositories.batch_repo import BatchRepository
from mocards.repositories.card_repo import CardRepository
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.services.card_service import CardService


class BatchNotFound(Exception): pass


class BatchService:
    def __init__(
        self,
        conn: Connection,
        batch_repo: BatchRepository,
        card_repo: CardRepository,
        clinic_repo: ClinicRepository,
        card_service: CardService,
    ):
        self.conn = conn
        self.batch_repo = batch_repo
        self.card_repo = card_repo
        self.clinic_repo = clinic_repo
        self.card_service = card_service

    async def create_batch(
        self,
        total_cards: int,
        location_code: str,
        created_by: str,
        notes: Optional[str] = None,
        batch_number: Optional[str] = None,
    ) -> dict:
        # Reject bad input before the batch row exists.
        await self.card_service.validate_generation_request(location_code, total_cards)

        async with self.conn.transaction():
            if not batch_number:
                batch_number = await self.card_service.generator.generate_batch_number()
            batch = await self.batch_repo.create(batch_number, total_cards, created_by, notes)
            generated = await self.card_service.generate_cards_for_batch(
                batch["id"], batch["batch_number"], location_code, total_cards, created_by=created_by
            )

        logging.info(f"Batch {batch_number} created by {created_by} with {total_cards} cards.")
        return {"batch": batch, **generated}

    async def list_batches(self) -> list[dict]:
        return await self.batch_repo.list_all()

    async def get_batch(self, batch_id: int) -> dict:
        batch = await self.batch_repo.get_by_id(batch_id)
        if batch is None:
            raise BatchNotFound(f"Batch {batch_id} not found.")
        return batch

    async def batch_statistics(self, batch_id: int) -> dict:
        batch = await self.get_batch(batch_id)
        counts = await self.card_repo.count_by_status(batch_id)
        by_status = {status.value: counts.get(status.value, 0) for status in CardStatus}
        return {
            "batch_id": batch["id"],
            "batch_number": batch["batch_number"],
            "total": sum(by_status.values()),
            "by_status": by_status,
        }

    async def archive_batch(self, batch_id: int) -> dict:
        await self.get_batch(batch_id)
        return await self.batch_repo.set_status(batch_id, BatchStatus.ARCHIVED.value)

    async def dashboard_stats(self) -> dict:
        counts = await self.card_repo.count_by_status()
        return {
            "total_clinics": await self.clinic_repo.count(),
            "total_batches": await self.batch_repo.count(),
            "total_cards": sum(counts.values()),
            "cards_by_status": {status.value: counts.get(status.value, 0) for status in CardStatus},
        }
