# tests/fakes.py
"""In-memory stand-ins for the asyncpg repositories.

Each fake keeps the public signature of the repository it replaces and works
on a shared ``Store`` so services see one consistent dataset.
"""
from __future__ import annotations

import copy
import itertools
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from asyncpg.exceptions import ForeignKeyViolationError

from mocards.core.codes import batch_sequence
from mocards.repositories.card_repo import DuplicateCode


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PerkInsertFailed(ForeignKeyViolationError):
    def __str__(self):
        return "insert or update on table \"card_perks\" violates foreign key constraint"


class Store:
    def __init__(self):
        self.cards: dict[int, dict] = {}
        self.perks: dict[int, dict] = {}
        self.batches: dict[int, dict] = {}
        self.clinics: dict[int, dict] = {}
        self.locations: dict[int, dict] = {}
        self.transactions: dict[int, dict] = {}
        self.appointments: dict[int, dict] = {}
        self.admins: dict[int, dict] = {}
        self._counters: dict[str, itertools.count] = {}

    def next_id(self, table: str) -> int:
        counter = self._counters.setdefault(table, itertools.count(1))
        return next(counter)

    # helpers used by tests to arrange data
    def add_location(self, code: str, is_active: bool = True) -> dict:
        row = {
            "id": self.next_id("locations"), "code": code, "location_name": code.title(),
            "description": None, "is_active": is_active, "created_at": _now(),
        }
        self.locations[row["id"]] = row
        return row

    def add_clinic(self, clinic_code: str, clinic_name: str, password_hash: str = "",
                   status: str = "active") -> dict:
        row = {
            "id": self.next_id("clinics"), "clinic_code": clinic_code, "clinic_name": clinic_name,
            "contact_email": None, "contact_phone": None, "address": None, "status": status,
            "password_hash": password_hash, "last_password_change": None,
            "created_at": _now(), "updated_at": _now(),
        }
        self.clinics[row["id"]] = row
        return row

    def add_admin(self, username: str, password_hash: str = "", is_active: bool = True) -> dict:
        row = {
            "id": self.next_id("admins"), "username": username, "password_hash": password_hash,
            "full_name": username.title(), "role": "admin", "is_active": is_active, "created_at": _now(),
        }
        self.admins[row["id"]] = row
        return row

    def add_batch(self, batch_number: str, total_cards: int = 0) -> dict:
        row = {
            "id": self.next_id("batches"), "batch_number": batch_number, "total_cards": total_cards,
            "cards_assigned": 0, "status": "active", "created_by": "admin", "notes": None,
            "created_at": _now(),
        }
        self.batches[row["id"]] = row
        return row


class FakeConnection:
    """Transactions snapshot the store and restore it when an exception escapes.

    Nested transactions behave like savepoints. Id counters are not rolled
    back, like Postgres sequences.
    """

    TABLES = ("cards", "perks", "batches", "clinics", "locations", "transactions", "appointments", "admins")

    def __init__(self, store: Store):
        self.store = store
        self.transactions_opened = 0

    @asynccontextmanager
    async def transaction(self):
        self.transactions_opened += 1
        snapshot = {table: copy.deepcopy(getattr(self.store, table)) for table in self.TABLES}
        try:
            yield self
        except BaseException:
            for table, rows in snapshot.items():
                setattr(self.store, table, rows)
            raise


class FakeCardRepository:
    def __init__(self, store: Store, collisions_on_insert: int = 0):
        self.store = store
        self.collisions_on_insert = collisions_on_insert
        self.bulk_insert_calls = 0

    async def get_by_id(self, card_id: int) -> dict | None:
        card = self.store.cards.get(card_id)
        return dict(card) if card else None

    async def get_by_codes(self, control_number: str, passcode: str) -> dict | None:
        for card in self.store.cards.values():
            if control_number in (card["control_number"], card["control_number_v2"]) and card["passcode"] == passcode:
                clinic = self.store.clinics.get(card["clinic_id"])
                batch = self.store.batches.get(card["batch_id"])
                return {
                    **card,
                    "clinic_name": clinic["clinic_name"] if clinic else None,
                    "batch_number": batch["batch_number"] if batch else None,
                }
        return None

    async def control_number_exists(self, control_number: str) -> bool:
        return any(card["control_number"] == control_number for card in self.store.cards.values())

    async def passcode_exists(self, passcode: str) -> bool:
        return any(card["passcode"] == passcode for card in self.store.cards.values())

    async def list_by_clinic(self, clinic_id: int) -> list[dict]:
        return [dict(card) for card in self.store.cards.values() if card["clinic_id"] == clinic_id]

    async def list_unassigned(self, limit: int = 100) -> list[dict]:
        rows = [dict(card) for card in self.store.cards.values() if card["status"] == "unassigned"]
        return rows[:limit]

    async def list_by_batch(self, batch_id: int) -> list[dict]:
        return [dict(card) for card in self.store.cards.values() if card["batch_id"] == batch_id]

    async def bulk_create(self, batch_id: int, location_code: str, codes: list[tuple[str, str]],
                          status: str, generation_method: str) -> list[dict]:
        self.bulk_insert_calls += 1
        if self.collisions_on_insert > 0:
            self.collisions_on_insert -= 1
            raise DuplicateCode('duplicate key value violates unique constraint "ix_cards_control_number"')

        taken_numbers = {card["control_number"] for card in self.store.cards.values()}
        taken_passcodes = {card["passcode"] for card in self.store.cards.values()}
        numbers = [number for number, _ in codes]
        passcodes = [passcode for _, passcode in codes]
        if (taken_numbers & set(numbers) or taken_passcodes & set(passcodes)
                or len(set(numbers)) != len(numbers) or len(set(passcodes)) != len(passcodes)):
            raise DuplicateCode("duplicate key value violates unique constraint")

        created = []
        for control_number, passcode in codes:
            row = {
                "id": self.store.next_id("cards"), "batch_id": batch_id, "clinic_id": None,
                "control_number": control_number, "control_number_v2": None, "passcode": passcode,
                "location_code": location_code, "status": status, "generation_method": generation_method,
                "assigned_at": None, "activated_at": None, "expires_at": None,
                "created_at": _now(), "updated_at": _now(),
            }
            self.store.cards[row["id"]] = row
            created.append(dict(row))
        return created

    async def assign_unassigned(self, card_ids: Iterable[int], clinic_id: int, assigned_at: datetime) -> list[dict]:
        updated = []
        for card_id in sorted(card_ids):
            card = self.store.cards.get(card_id)
            if card and card["status"] == "unassigned":
                card.update(status="assigned", clinic_id=clinic_id, assigned_at=assigned_at, updated_at=assigned_at)
                updated.append(dict(card))
        return updated

    async def reassign(self, card_id: int, clinic_id: int, assigned_at: datetime) -> dict | None:
        card = self.store.cards.get(card_id)
        if not card or card["status"] != "assigned" or card["clinic_id"] == clinic_id:
            return None
        card.update(clinic_id=clinic_id, assigned_at=assigned_at, updated_at=assigned_at)
        return dict(card)

    async def activate(self, card_id: int, clinic_id: int, activated_at: datetime, expires_at: datetime,
                       control_number_v2: Optional[str] = None) -> dict | None:
        card = self.store.cards.get(card_id)
        if not card or card["clinic_id"] != clinic_id or card["status"] != "assigned":
            return None
        if control_number_v2 and any(
            other["control_number_v2"] == control_number_v2 for other in self.store.cards.values()
        ):
            raise DuplicateCode('duplicate key value violates unique constraint "uq_cards_control_number_v2"')
        card.update(status="activated", activated_at=activated_at, expires_at=expires_at, updated_at=activated_at)
        if control_number_v2:
            card["control_number_v2"] = control_number_v2
        return dict(card)

    async def suspend(self, card_id: int, from_statuses: list[str], suspended_at: datetime) -> dict | None:
        card = self.store.cards.get(card_id)
        if not card or card["status"] not in from_statuses:
            return None
        card.update(status="suspended", updated_at=suspended_at)
        return dict(card)

    async def expire_overdue(self, now: datetime) -> list[dict]:
        expired = []
        for card in self.store.cards.values():
            if card["status"] == "activated" and card["expires_at"] and card["expires_at"] < now:
                card.update(status="expired", updated_at=now)
                expired.append(dict(card))
        return expired

    async def count_by_status(self, batch_id: Optional[int] = None) -> dict[str, int]:
        counts: dict[str, int] = {}
        for card in self.store.cards.values():
            if batch_id is None or card["batch_id"] == batch_id:
                counts[card["status"]] = counts.get(card["status"], 0) + 1
        return counts


class FakePerkRepository:
    def __init__(self, store: Store, fail_for_card_ids: Optional[set[int]] = None):
        self.store = store
        self.fail_for_card_ids = fail_for_card_ids or set()

    async def create_many(self, card_id: int, perks: list[tuple[str, Decimal]], expires_at: datetime) -> list[dict]:
        if card_id in self.fail_for_card_ids:
            raise PerkInsertFailed()
        created = []
        for perk_type, value in perks:
            row = {
                "id": self.store.next_id("perks"), "card_id": card_id, "perk_type": perk_type,
                "perk_value": Decimal(value), "claimed": False, "claimed_at": None,
                "claimed_by_clinic_id": None, "expires_at": expires_at, "created_at": _now(),
            }
            self.store.perks[row["id"]] = row
            created.append(dict(row))
        return created

    async def list_by_card(self, card_id: int) -> list[dict]:
        return [dict(perk) for perk in self.store.perks.values() if perk["card_id"] == card_id]

    async def claim(self, card_id: int, perk_type: str, clinic_id: int, claimed_at: datetime) -> dict | None:
        for perk in self.store.perks.values():
            if perk["card_id"] == card_id and perk["perk_type"] == perk_type and not perk["claimed"]:
                if perk["expires_at"] is not None and perk["expires_at"] <= claimed_at:
                    return None
                perk.update(claimed=True, claimed_at=claimed_at, claimed_by_clinic_id=clinic_id)
                return dict(perk)
        return None


class FakeBatchRepository:
    def __init__(self, store: Store):
        self.store = store

    async def get_by_id(self, batch_id: int) -> dict | None:
        batch = self.store.batches.get(batch_id)
        return dict(batch) if batch else None

    async def list_all(self) -> list[dict]:
        return [dict(batch) for batch in reversed(list(self.store.batches.values()))]

    async def count(self) -> int:
        return len(self.store.batches)

    async def max_sequence(self) -> int:
        sequences = [batch_sequence(batch["batch_number"]) for batch in self.store.batches.values()]
        return max([s for s in sequences if s is not None], default=0)

    async def create(self, batch_number: str, total_cards: int, created_by: str,
                     notes: Optional[str] = None) -> dict:
        if any(batch["batch_number"] == batch_number for batch in self.store.batches.values()):
            raise ValueError(f"Batch number {batch_number} already exists")
        batch = self.store.add_batch(batch_number, total_cards)
        batch.update(created_by=created_by, notes=notes)
        return dict(batch)

    async def increment_assigned(self, batch_id: int, amount: int) -> None:
        self.store.batches[batch_id]["cards_assigned"] += amount

    async def set_status(self, batch_id: int, status: str) -> dict | None:
        batch = self.store.batches.get(batch_id)
        if not batch:
            return None
        batch["status"] = status
        return dict(batch)


class FakeClinicRepository:
    def __init__(self, store: Store):
        self.store = store

    async def get_by_id(self, clinic_id: int) -> dict | None:
        clinic = self.store.clinics.get(clinic_id)
        return dict(clinic) if clinic else None

    async def get_by_code(self, clinic_code: str) -> dict | None:
        for clinic in self.store.clinics.values():
            if clinic["clinic_code"] == clinic_code:
                return dict(clinic)
        return None

    async def list_all(self, active_only: bool = False) -> list[dict]:
        clinics = [dict(c) for c in self.store.clinics.values() if not active_only or c["status"] == "active"]
        return sorted(clinics, key=lambda c: c["clinic_name"])

    async def count(self) -> int:
        return len(self.store.clinics)

    async def create(self, clinic_in: dict) -> dict:
        if await self.get_by_code(clinic_in["clinic_code"]):
            raise ValueError(f"Clinic code {clinic_in['clinic_code']} already exists")
        clinic = self.store.add_clinic(clinic_in["clinic_code"], clinic_in["clinic_name"], clinic_in["password_hash"])
        clinic.update(
            contact_email=clinic_in.get("contact_email"),
            contact_phone=clinic_in.get("contact_phone"),
            address=clinic_in.get("address"),
        )
        return dict(clinic)

    async def update_password(self, clinic_id: int, password_hash: str, changed_at: datetime) -> dict | None:
        clinic = self.store.clinics.get(clinic_id)
        if not clinic:
            return None
        clinic.update(password_hash=password_hash, last_password_change=changed_at, updated_at=changed_at)
        return dict(clinic)


class FakeLocationCodeRepository:
    def __init__(self, store: Store):
        self.store = store

    async def get_active(self, code: str) -> dict | None:
        for location in self.store.locations.values():
            if location["code"] == code and location["is_active"]:
                return dict(location)
        return None

    async def list_active(self) -> list[dict]:
        rows = [dict(l) for l in self.store.locations.values() if l["is_active"]]
        return sorted(rows, key=lambda l: l["code"])

    async def create(self, code: str, location_name: str, description: Optional[str] = None,
                     is_active: bool = True) -> dict:
        if any(l["code"] == code for l in self.store.locations.values()):
            raise ValueError(f"Location code {code} already exists")
        location = self.store.add_location(code, is_active)
        location.update(location_name=location_name, description=description)
        return dict(location)


class FakeCardTransactionRepository:
    def __init__(self, store: Store):
        self.store = store

    async def log(self, card_id: int, transaction_type: str, performed_by: str,
                  performed_by_id: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> dict:
        row = {
            "id": self.store.next_id("transactions"), "card_id": card_id,
            "transaction_type": transaction_type, "performed_by": performed_by,
            "performed_by_id": performed_by_id, "details": details or {}, "created_at": _now(),
        }
        self.store.transactions[row["id"]] = row
        return dict(row)

    async def log_many(self, card_ids: list[int], transaction_type: str, performed_by: str,
                       performed_by_id: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        for card_id in card_ids:
            await self.log(card_id, transaction_type, performed_by, performed_by_id, details)

    async def list_by_card(self, card_id: int) -> list[dict]:
        return [dict(t) for t in self.store.transactions.values() if t["card_id"] == card_id]


class FakeAppointmentRepository:
    def __init__(self, store: Store):
        self.store = store

    async def create(self, appointment_in: dict) -> dict:
        row = {
            "id": self.store.next_id("appointments"), "status": "scheduled",
            "patient_phone": None, "patient_email": None, "notes": None,
            "created_at": _now(), "updated_at": _now(),
            **appointment_in,
        }
        self.store.appointments[row["id"]] = row
        return dict(row)

    async def get_by_id(self, appointment_id: int) -> dict | None:
        row = self.store.appointments.get(appointment_id)
        return dict(row) if row else None

    async def list_by_clinic(self, clinic_id: int, status: Optional[str] = None) -> list[dict]:
        return [
            dict(a) for a in self.store.appointments.values()
            if a["clinic_id"] == clinic_id and (status is None or a["status"] == status)
        ]

    async def update_status(self, appointment_id: int, from_statuses: list[str], to_status: str,
                            updated_at: datetime) -> dict | None:
        row = self.store.appointments.get(appointment_id)
        if not row or row["status"] not in from_statuses:
            return None
        row.update(status=to_status, updated_at=updated_at)
        return dict(row)


class FakeAdminRepository:
    def __init__(self, store: Store):
        self.store = store

    async def get_by_username(self, username: str) -> Optional[dict]:
        for admin in self.store.admins.values():
            if admin["username"] == username:
                return dict(admin)
        return None

    async def get_by_id(self, admin_id: int) -> Optional[dict]:
        admin = self.store.admins.get(admin_id)
        return dict(admin) if admin else None

    async def create(self, admin_in: dict) -> dict:
        admin = self.store.add_admin(admin_in["username"], admin_in["password_hash"])
        return dict(admin)
