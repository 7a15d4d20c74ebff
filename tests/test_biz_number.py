"""Business number allocation tests."""

import random

import pytest

from bizcards.models.card import Card
from bizcards.schemas.card import CardCreate
from bizcards.security.biz_number import BizNumberAllocator
from bizcards.services import cards as card_service
from bizcards.services import users as user_service
from bizcards.services.errors import AllocationExhausted, UniquenessConflict
from conftest import CARD_PAYLOAD


class SequenceRng:
    """Returns preset draws in order."""

    def __init__(self, values):
        self.values = iter(values)

    def randint(self, low, high):
        return next(self.values)


def test_draws_within_range():
    allocator = BizNumberAllocator(is_taken=lambda n: False, rng=random.Random(42))
    for _ in range(50):
        assert 1_000_000 <= allocator.allocate() <= 9_999_999


def test_skips_taken_numbers():
    taken = {1111111, 2222222}
    allocator = BizNumberAllocator(
        is_taken=taken.__contains__, rng=SequenceRng([1111111, 2222222, 3333333])
    )
    assert allocator.allocate() == 3333333


def test_exhausted_when_every_draw_is_taken():
    calls = []

    def always_taken(candidate):
        calls.append(candidate)
        return True

    allocator = BizNumberAllocator(is_taken=always_taken, max_retries=5)
    with pytest.raises(AllocationExhausted) as exc_info:
        allocator.allocate()
    assert len(calls) == 5
    assert exc_info.value.attempts == 5


def test_conflict_on_insert_restarts_with_fresh_draw():
    allocator = BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([1234567, 7654321]))
    attempted = []

    def insert(candidate):
        attempted.append(candidate)
        if candidate == 1234567:
            raise UniquenessConflict("Business number already in use", field="biz_number")
        return candidate

    assert allocator.insert_unique(insert) == 7654321
    assert attempted == [1234567, 7654321]


def test_other_conflicts_propagate():
    allocator = BizNumberAllocator(is_taken=lambda n: False, rng=random.Random(1))

    def insert(candidate):
        raise UniquenessConflict("Email already registered", field="email")

    with pytest.raises(UniquenessConflict) as exc_info:
        allocator.insert_unique(insert)
    assert exc_info.value.field == "email"


def test_persistent_conflicts_exhaust():
    allocator = BizNumberAllocator(is_taken=lambda n: False, max_retries=3, rng=random.Random(1))

    def insert(candidate):
        raise UniquenessConflict("Business number already in use", field="biz_number")

    with pytest.raises(AllocationExhausted):
        allocator.insert_unique(insert)


@pytest.mark.parametrize("kwargs", [{"max_retries": 0}, {"low": 10, "high": 5}])
def test_invalid_configuration_rejected(kwargs):
    with pytest.raises(ValueError):
        BizNumberAllocator(is_taken=lambda n: False, **kwargs)


def test_unique_index_race_restarts_allocation(db):
    """Two allocations that both pass the existence check still end up unique."""
    owner = user_service.create_user(db, "owner@example.com", "testpass123", is_business=True)
    card_data = CardCreate(**CARD_PAYLOAD)
    first = card_service.create_card(
        db,
        card_data,
        owner.id,
        allocator=BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([1234567])),
    )

    # The stale existence check says the number is free; the unique index disagrees
    racing = BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([1234567, 7654321]))
    second = card_service.create_card(db, card_data, owner.id, allocator=racing)

    assert first.biz_number == 1234567
    assert second.biz_number == 7654321
    assert db.query(Card).count() == 2


def test_change_biz_number_assigns_new_value(db):
    owner = user_service.create_user(db, "owner@example.com", "testpass123", is_business=True)
    card = card_service.create_card(
        db,
        CardCreate(**CARD_PAYLOAD),
        owner.id,
        allocator=BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([1234567])),
    )

    changed = card_service.change_biz_number(
        db, card, allocator=BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([2345678]))
    )
    assert changed.biz_number == 2345678


def test_lookup_by_biz_number(db):
    owner = user_service.create_user(db, "owner@example.com", "testpass123", is_business=True)
    card = card_service.create_card(
        db,
        CardCreate(**CARD_PAYLOAD),
        owner.id,
        allocator=BizNumberAllocator(is_taken=lambda n: False, rng=SequenceRng([4567890])),
    )

    assert card_service.get_card_by_biz_number(db, 4567890).id == card.id
    assert card_service.get_card_by_biz_number(db, 1000000) is None
    assert card_service.biz_number_taken(db, 4567890)
