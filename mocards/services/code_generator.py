# mocards/services/code_generator.py

import random
from typing import Optional

from mocards.core import codes
from mocards.core.config import settings
from mocards.repositories.batch_repo import BatchRepository
from mocards.repositories.card_repo import CardRepository


CONTROL_NUMBER_RETRIES = 5
PASSCODE_RETRIES = 3


class GenerationExhausted(Exception):
    def __init__(self, kind: str, scope: str, start, attempts: int):
        self.kind = kind
        self.scope = scope
        self.start = start
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique {kind} for {scope} starting at {start} "
            f"after {attempts} attempts."
        )


class CodeGenerator:
    """Builds control numbers, passcodes and batch numbers.

    The lookups made here only avoid the obvious collisions. The unique
    constraints on ``cards`` remain the authority, so callers must still
    handle a duplicate on insert.
    """

    def __init__(
        self,
        card_repo: CardRepository,
        batch_repo: BatchRepository,
        prefix: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.card_repo = card_repo
        self.batch_repo = batch_repo
        self.prefix = prefix or settings.CONTROL_NUMBER_PREFIX
        self.rng = rng or random.Random()

    async def generate_control_number(
        self,
        batch_label: str,
        sequence_number: int,
        max_retries: int = CONTROL_NUMBER_RETRIES,
        reserved: Optional[set[str]] = None,
    ) -> str:
        reserved = reserved if reserved is not None else set()
        for offset in range(max_retries):
            candidate = codes.format_control_number(self.prefix, batch_label, sequence_number + offset)
            if candidate in reserved:
                continue
            if not await self.card_repo.control_number_exists(candidate):
                return candidate
        raise GenerationExhausted("control number", f"batch {batch_label}", sequence_number, max_retries)

    async def generate_passcode(
        self,
        location_code: str,
        max_retries: int = PASSCODE_RETRIES,
        reserved: Optional[set[str]] = None,
    ) -> str:
        reserved = reserved if reserved is not None else set()
        for _ in range(max_retries):
            candidate = codes.format_passcode(location_code, self.rng.randint(0, 9999))
            if candidate in reserved:
                continue
            if not await self.card_repo.passcode_exists(candidate):
                return candidate
        raise GenerationExhausted("passcode", f"location {location_code}", "random", max_retries)

    async def generate_batch_number(self) -> str:
        next_sequence = await self.batch_repo.max_sequence() + 1
        if next_sequence > codes.BATCH_SEQUENCE_MAX:
            return codes.fallback_batch_number()
        return codes.format_batch_number(next_sequence)

    async def build_card_codes(self, batch_label: str, location_code: str, count: int) -> list[tuple[str, str]]:
        """Control number and passcode pairs for cards 1..count of a batch."""
        control_numbers: set[str] = set()
        passcodes: set[str] = set()
        pairs = []
        last_sequence = 0
        for i in range(1, count + 1):
            control_number = await self.generate_control_number(
                batch_label, max(i, last_sequence + 1), reserved=control_numbers
            )
            passcode = await self.generate_passcode(location_code, reserved=passcodes)
            control_numbers.add(control_number)
            passcodes.add(passcode)
            last_sequence = codes.card_sequence(control_number)
            pairs.append((control_number, passcode))
        return pairs
