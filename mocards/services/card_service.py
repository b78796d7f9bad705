# mocards/services/card_service.py

import logging
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from typing import Optional

from asyncpg import Connection, PostgresError

from mocards.core import codes
from mocards.core.config import settings
from mocards.db.models.card_model import CardStatus, GenerationMethod
from mocards.db.models.card_perk_model import PerkType
from mocards.db.models.card_transaction_model import TransactionType, PerformedBy
from mocards.repositories.card_repo import CardRepository, DuplicateCode
from mocards.repositories.perk_repo import PerkRepository
from mocards.repositories.batch_repo import BatchRepository
from mocards.repositories.clinic_repo import ClinicRepository
from mocards.repositories.location_code_repo import LocationCodeRepository
from mocards.repositories.card_transaction_repo import CardTransactionRepository
from mocards.services.code_generator import CodeGenerator, GenerationExhausted
from mocards.services.card_lifecycle import can_transition, require_transition, source_statuses


BULK_INSERT_ATTEMPTS = 3

DEFAULT_PERKS: list[tuple[str, Decimal]] = [
    (PerkType.CONSULTATION.value, Decimal("500.00")),
    (PerkType.CLEANING.value, Decimal("800.00")),
    (PerkType.XRAY.value, Decimal("1000.00")),
    (PerkType.EXTRACTION.value, Decimal("1500.00")),
    (PerkType.FILLING.value, Decimal("1200.00")),
]


class InvalidCardCount(Exception): pass
class InvalidLocationCode(Exception): pass
class CardNotFound(Exception): pass
class ClinicNotFound(Exception): pass
class PerkUnavailable(Exception): pass


class NotAssignedToClinic(Exception):
    def __init__(self, card_id: int, clinic_id: int):
        self.card_id = card_id
        self.clinic_id = clinic_id
        super().__init__(f"Card {card_id} is not assigned to clinic {clinic_id}.")


class CardService:
    def __init__(
        self,
        conn: Connection,
        card_repo: CardRepository,
        perk_repo: PerkRepository,
        batch_repo: BatchRepository,
        clinic_repo: ClinicRepository,
        location_repo: LocationCodeRepository,
        tx_repo: CardTransactionRepository,
        generator: Optional[CodeGenerator] = None,
    ):
        self.conn = conn
        self.card_repo = card_repo
        self.perk_repo = perk_repo
        self.batch_repo = batch_repo
        self.clinic_repo = clinic_repo
        self.location_repo = location_repo
        self.tx_repo = tx_repo
        self.generator = generator or CodeGenerator(card_repo, batch_repo)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    async def validate_generation_request(self, location_code: str, count: int) -> None:
        if count < 1 or count > settings.MAX_CARDS_PER_BATCH:
            raise InvalidCardCount(f"Card count must be between 1 and {settings.MAX_CARDS_PER_BATCH}.")
        location = await self.location_repo.get_active(location_code)
        if location is None:
            raise InvalidLocationCode(f"Location code {location_code} does not exist or is inactive.")

    # ------------------ Generation ------------------ #

    async def generate_cards_for_batch(
        self,
        batch_id: int,
        batch_label: str,
        location_code: str,
        count: int,
        created_by: str = "admin",
    ) -> dict:
        """Create ``count`` unassigned cards for a batch, each with the default perks.

        Returns ``{"cards": [...], "perkless_card_ids": [...]}``. A card whose
        perks could not be written is still kept and reported in
        ``perkless_card_ids``.
        """
        await self.validate_generation_request(location_code, count)

        cards: list[dict] = []
        for attempt in range(1, BULK_INSERT_ATTEMPTS + 1):
            card_codes = await self.generator.build_card_codes(batch_label, location_code, count)
            try:
                async with self.conn.transaction():
                    cards = await self.card_repo.bulk_create(
                        batch_id,
                        location_code,
                        card_codes,
                        CardStatus.UNASSIGNED.value,
                        GenerationMethod.AUTO.value,
                    )
                    await self.tx_repo.log_many(
                        [card["id"] for card in cards],
                        TransactionType.CREATED.value,
                        PerformedBy.ADMIN.value,
                        created_by,
                        {"batch_number": batch_label},
                    )
                break
            except DuplicateCode as e:
                logging.warning(f"Code collision on insert for batch {batch_label} (attempt {attempt}): {e}")
        else:
            raise GenerationExhausted("card set", f"batch {batch_label}", 1, BULK_INSERT_ATTEMPTS)

        perk_expiry = self._now() + timedelta(days=settings.CARD_VALIDITY_DAYS)
        perkless_card_ids = []
        for card in cards:
            try:
                async with self.conn.transaction():
                    await self.perk_repo.create_many(card["id"], DEFAULT_PERKS, perk_expiry)
            except PostgresError as e:
                logging.error(f"Skipping default perks for card {card['control_number']}: {e}")
                perkless_card_ids.append(card["id"])

        logging.info(
            f"Generated {len(cards)} cards for batch {batch_label} "
            f"({len(perkless_card_ids)} without perks)."
        )
        return {"cards": cards, "perkless_card_ids": perkless_card_ids}

    # ------------------ Assignment ------------------ #

    async def assign_cards_to_clinic(self, card_ids: list[int], clinic_id: int, assigned_by: str) -> list[dict]:
        """Assign the unassigned cards among ``card_ids``; others are left out of the result."""
        clinic = await self.clinic_repo.get_by_id(clinic_id)
        if clinic is None:
            raise ClinicNotFound(f"Clinic {clinic_id} not found.")

        async with self.conn.transaction():
            assigned = await self.card_repo.assign_unassigned(set(card_ids), clinic_id, self._now())
            await self.tx_repo.log_many(
                [card["id"] for card in assigned],
                TransactionType.ASSIGNED.value,
                PerformedBy.ADMIN.value,
                assigned_by,
                {"clinic_id": clinic_id, "clinic_code": clinic["clinic_code"]},
            )
            per_batch: dict[int, int] = {}
            for card in assigned:
                per_batch[card["batch_id"]] = per_batch.get(card["batch_id"], 0) + 1
            for batch_id, amount in per_batch.items():
                await self.batch_repo.increment_assigned(batch_id, amount)

        if len(assigned) < len(set(card_ids)):
            logging.info(f"Assigned {len(assigned)} of {len(set(card_ids))} requested cards to clinic {clinic_id}.")
        return assigned

    async def reassign_card(self, card_id: int, clinic_id: int, admin_id: str) -> dict:
        card = await self._get_card(card_id)
        require_transition("reassign", card["status"])
        if card["clinic_id"] == clinic_id:
            raise ValueError(f"Card {card_id} is already assigned to clinic {clinic_id}.")
        clinic = await self.clinic_repo.get_by_id(clinic_id)
        if clinic is None:
            raise ClinicNotFound(f"Clinic {clinic_id} not found.")

        async with self.conn.transaction():
            updated = await self.card_repo.reassign(card_id, clinic_id, self._now())
            if updated is None:
                raise CardNotFound(f"Card {card_id} changed while being reassigned.")
            await self.tx_repo.log(
                card_id,
                TransactionType.REASSIGNED.value,
                PerformedBy.ADMIN.value,
                admin_id,
                {"from_clinic_id": card["clinic_id"], "to_clinic_id": clinic_id},
            )
        return updated

    # ------------------ Activation ------------------ #

    async def activate_card(
        self,
        card_id: int,
        clinic_id: int,
        activated_by: str,
        activated_by_name: str,
        location_number: Optional[str] = None,
        patient_name: Optional[str] = None,
    ) -> dict:
        card = await self._get_card(card_id)
        if card["clinic_id"] != clinic_id or not can_transition("activate", card["status"]):
            raise NotAssignedToClinic(card_id, clinic_id)

        activated_at = self._now()
        expires_at = activated_at + timedelta(days=settings.CARD_VALIDITY_DAYS)
        control_number_v2 = None
        if location_number:
            # card ids are global; in-batch sequences repeat across batches
            control_number_v2 = codes.format_control_number_v2(location_number, clinic_id, card["id"])

        async with self.conn.transaction():
            activated = await self.card_repo.activate(
                card_id, clinic_id, activated_at, expires_at, control_number_v2
            )
            if activated is None:
                raise NotAssignedToClinic(card_id, clinic_id)
            await self.tx_repo.log(
                card_id,
                TransactionType.ACTIVATED.value,
                PerformedBy.CLINIC.value,
                activated_by,
                {
                    "activated_by_name": activated_by_name,
                    "patient_name": patient_name,
                    "expires_at": expires_at.isoformat(),
                    "control_number_v2": control_number_v2,
                },
            )
        return activated

    # ------------------ Administrative Overrides ------------------ #

    async def suspend_card(self, card_id: int, admin_id: str, reason: Optional[str] = None) -> dict:
        card = await self._get_card(card_id)
        require_transition("suspend", card["status"])

        async with self.conn.transaction():
            suspended = await self.card_repo.suspend(card_id, source_statuses("suspend"), self._now())
            if suspended is None:
                raise CardNotFound(f"Card {card_id} changed while being suspended.")
            await self.tx_repo.log(
                card_id,
                TransactionType.SUSPENDED.value,
                PerformedBy.ADMIN.value,
                admin_id,
                {"previous_status": card["status"], "reason": reason},
            )
        return suspended

    async def expire_overdue_cards(self) -> list[dict]:
        async with self.conn.transaction():
            expired = await self.card_repo.expire_overdue(self._now())
            await self.tx_repo.log_many(
                [card["id"] for card in expired],
                TransactionType.EXPIRED.value,
                PerformedBy.SYSTEM.value,
            )
        if expired:
            logging.info(f"Expired {len(expired)} overdue cards.")
        return expired

    # ------------------ Lookup & Perks ------------------ #

    async def lookup_card(self, control_number: str, passcode: str) -> dict:
        card = await self.card_repo.get_by_codes(
            codes.normalize_control_number(control_number),
            codes.normalize_passcode(passcode),
        )
        if card is None:
            raise CardNotFound("No card matches this control number and passcode.")
        card["perks"] = await self.perk_repo.list_by_card(card["id"])
        return card

    async def claim_perk(self, card_id: int, perk_type: str, clinic_id: int, claimed_by_name: str) -> dict:
        card = await self._get_card(card_id)
        if card["clinic_id"] != clinic_id:
            raise NotAssignedToClinic(card_id, clinic_id)
        now = self._now()
        if card["status"] != CardStatus.ACTIVATED.value:
            raise PerkUnavailable(f"Card {card_id} is {card['status']}, perks can only be claimed on activated cards.")
        if card["expires_at"] is not None and card["expires_at"] <= now:
            raise PerkUnavailable(f"Card {card_id} expired on {card['expires_at'].date()}.")

        async with self.conn.transaction():
            perk = await self.perk_repo.claim(card_id, perk_type, clinic_id, now)
            if perk is None:
                raise PerkUnavailable(f"Perk {perk_type} is already claimed or not available on card {card_id}.")
            await self.tx_repo.log(
                card_id,
                TransactionType.PERK_CLAIMED.value,
                PerformedBy.CLINIC.value,
                str(clinic_id),
                {"perk_type": perk_type, "perk_value": str(perk["perk_value"]), "claimed_by_name": claimed_by_name},
            )
        return perk

    async def list_transactions(self, card_id: int) -> list[dict]:
        await self._get_card(card_id)
        return await self.tx_repo.list_by_card(card_id)

    async def _get_card(self, card_id: int) -> dict:
        card = await self.card_repo.get_by_id(card_id)
        if card is None:
            raise CardNotFound(f"Card {card_id} not found.")
        return card
