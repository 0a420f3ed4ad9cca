"""
Tests for the seeded linear-congruential PRNG.
"""

import pytest

from py_worldgen.core.seeded_prng import (
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    SeededRandom,
    hash_seed,
)


class TestSeededRandom:
    """Test the PRNG recurrence and its helpers."""

    def test_first_value_follows_recurrence(self):
        """The first draw is one step of the recurrence from the seed."""
        rng = SeededRandom(12345)
        value = rng.random()
        assert rng.state == 96382
        assert value == 96382 / 233280

    def test_sequence_matches_manual_recurrence(self):
        rng = SeededRandom(42)
        state = 42
        for _ in range(100):
            state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
            assert rng.random() == state / LCG_MODULUS

    def test_values_in_unit_interval(self):
        rng = SeededRandom(7)
        values = [rng() for _ in range(5000)]
        assert all(0 <= v < 1 for v in values)

    def test_same_seed_same_stream(self):
        a = SeededRandom(987)
        b = SeededRandom(987)
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_different_seeds_differ(self):
        a = SeededRandom(1)
        b = SeededRandom(2)
        assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]

    def test_negative_seed_uses_absolute_value(self):
        assert SeededRandom(-5).seed == 5
        assert SeededRandom(-5).random() == SeededRandom(5).random()

    def test_string_seed(self):
        """String seeds hash to a stable integer."""
        assert SeededRandom("forest").seed == abs(hash_seed("forest"))
        assert SeededRandom("forest").random() == SeededRandom("forest").random()
        assert hash_seed("") == 0
        assert hash_seed("a") == 97

    def test_call_count(self):
        rng = SeededRandom(3)
        for _ in range(4):
            rng.random()
        rng.uniform(0, 1)
        assert rng.call_count == 5


class TestSeededRandomHelpers:
    """Test the derived sampling helpers."""

    def setup_method(self):
        self.rng = SeededRandom(2024)

    def test_uniform_bounds(self):
        for _ in range(500):
            value = self.rng.uniform(-3.0, 8.0)
            assert -3.0 <= value < 8.0

    def test_randint_inclusive(self):
        values = {self.rng.randint(1, 3) for _ in range(500)}
        assert values == {1, 2, 3}

    def test_chance_extremes(self):
        assert not any(self.rng.chance(0.0) for _ in range(100))
        assert all(self.rng.chance(1.0) for _ in range(100))

    def test_choice(self):
        items = ["a", "b", "c"]
        picks = {self.rng.choice(items) for _ in range(200)}
        assert picks == set(items)

    def test_choice_empty_raises(self):
        with pytest.raises(IndexError):
            self.rng.choice([])

    def test_weighted_choice_zero_weight_never_chosen(self):
        picks = {self.rng.weighted_choice(["never", "always"], [0.0, 1.0]) for _ in range(200)}
        assert picks == {"always"}

    def test_weighted_choice_length_mismatch(self):
        with pytest.raises(ValueError):
            self.rng.weighted_choice(["a", "b"], [1.0])
