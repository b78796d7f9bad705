import random

import pytest

from mocards.services.code_generator import CodeGenerator, GenerationExhausted
from tests.fakes import FakeCardRepository, FakeBatchRepository


class FixedRandom(random.Random):
    def randint(self, a, b):
        return 1234


@pytest.fixture
def card_repo(store):
    return FakeCardRepository(store)


@pytest.fixture
def generator(store, card_repo):
    return CodeGenerator(card_repo, FakeBatchRepository(store), prefix="PHL", rng=random.Random(7))


async def persist(card_repo, *pairs):
    await card_repo.bulk_create(1, "MNL", list(pairs), "unassigned", "auto")


@pytest.mark.anyio
async def test_control_number_skips_persisted_value(generator, card_repo):
    first = await generator.generate_control_number("B1", 1)
    assert first == "PHL-B1-0001"

    await persist(card_repo, (first, "MNL-0001"))
    assert await generator.generate_control_number("B1", 1) == "PHL-B1-0002"


@pytest.mark.anyio
async def test_control_number_gives_up_after_five_candidates(generator, card_repo):
    await persist(card_repo, *[(f"PHL-B1-{n:04d}", f"MNL-{n:04d}") for n in range(1, 6)])

    with pytest.raises(GenerationExhausted) as exc:
        await generator.generate_control_number("B1", 1)
    assert exc.value.attempts == 5
    assert exc.value.start == 1


@pytest.mark.anyio
async def test_reserved_control_numbers_are_skipped(generator):
    value = await generator.generate_control_number("B1", 1, reserved={"PHL-B1-0001"})
    assert value == "PHL-B1-0002"


@pytest.mark.anyio
async def test_passcode_format(generator):
    passcode = await generator.generate_passcode("CAV")
    location, digits = passcode.split("-")
    assert location == "CAV"
    assert len(digits) == 4 and digits.isdigit()


@pytest.mark.anyio
async def test_passcode_gives_up_when_every_draw_collides(store, card_repo):
    generator = CodeGenerator(card_repo, FakeBatchRepository(store), prefix="PHL", rng=FixedRandom())
    await persist(card_repo, ("PHL-B1-0001", "MNL-1234"))

    with pytest.raises(GenerationExhausted) as exc:
        await generator.generate_passcode("MNL")
    assert exc.value.attempts == 3


@pytest.mark.anyio
async def test_batch_numbers_follow_highest_sequence(store, generator):
    assert await generator.generate_batch_number() == "BATCH-001"

    store.add_batch("BATCH-007")
    store.add_batch("BTH445566")
    assert await generator.generate_batch_number() == "BATCH-008"


@pytest.mark.anyio
async def test_batch_number_falls_back_after_sequence_range(store, generator):
    store.add_batch("BATCH-999")
    batch_number = await generator.generate_batch_number()
    assert batch_number.startswith("BTH")
    assert len(batch_number) == 9


@pytest.mark.anyio
async def test_build_card_codes_keeps_sequence_moving_forward(generator, card_repo):
    await persist(card_repo, ("PHL-B2-0002", "MNL-0002"))

    pairs = await generator.build_card_codes("B2", "MNL", 3)

    assert [number for number, _ in pairs] == ["PHL-B2-0001", "PHL-B2-0003", "PHL-B2-0004"]
    passcodes = [passcode for _, passcode in pairs]
    assert len(set(passcodes)) == 3
    assert "MNL-0002" not in passcodes
