import random

import pytest

from rqm.errors import IdExhaustedError
from rqm.ids import MAX_ATTEMPTS, IdGenerator, find_ids, is_valid_id
from tests.helpers import ScriptedRandom, rid


def test_generated_ids_have_fixed_form():
    gen = IdGenerator(random.Random(1234))
    seen = set()
    ids = [gen.generate(seen) for _ in range(50)]
    assert all(is_valid_id(i) for i in ids)
    assert len(set(ids)) == 50
    assert seen == set(ids)


def test_seeded_source_is_reproducible():
    a = [IdGenerator(random.Random(7)).generate(set()) for _ in range(3)]
    b = [IdGenerator(random.Random(7)).generate(set()) for _ in range(3)]
    assert a == b


def test_collision_retries_until_free():
    rng = ScriptedRandom([1, 1, 2])
    seen = {rid(1)}
    assert IdGenerator(rng).generate(seen) == rid(2)
    assert rng.calls == 3
    assert seen == {rid(1), rid(2)}


def test_exhaustion_after_max_attempts():
    rng = ScriptedRandom([5])
    seen = {rid(5)}
    with pytest.raises(IdExhaustedError):
        IdGenerator(rng).generate(seen)
    assert rng.calls == MAX_ATTEMPTS
    assert seen == {rid(5)}


def test_find_ids_ignores_malformed_tokens():
    text = "rq-0000abcd rq-XYZ12345 rq-123 rq-0000ABCD xrq-00000001 rq-000000011 rq-0000abcd"
    assert find_ids(text) == {"rq-0000abcd"}
