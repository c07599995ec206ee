"""Tests for seeded percentile rolls."""

from __future__ import annotations

import pytest

from story_forge.engine.dice import PercentileRoll, PercentileRoller


class TestPercentileRoll:
    """Tests for the PercentileRoll value."""

    @pytest.mark.parametrize(
        ("roll", "chance", "success"),
        [
            (1, 1, True),
            (50, 50, True),
            (51, 50, False),
            (1, 0, False),
            (100, 100, True),
        ],
    )
    def test_success(self, roll: int, chance: int, success: bool) -> None:
        """Test a roll succeeds when it does not exceed the chance."""
        assert PercentileRoll(roll=roll, chance=chance).success is success


class TestPercentileRoller:
    """Tests for the PercentileRoller class."""

    def test_rolls_in_range(self) -> None:
        """Test every roll lies between 1 and 100."""
        roller = PercentileRoller(seed=1234)

        rolls = [roller.roll() for _ in range(500)]

        assert min(rolls) >= 1
        assert max(rolls) <= 100

    def test_same_seed_same_sequence(self) -> None:
        """Test two rollers with one seed replay the same rolls."""
        first = PercentileRoller(seed=42)
        second = PercentileRoller(seed=42)

        assert [first.roll() for _ in range(50)] == [second.roll() for _ in range(50)]

    def test_rollers_are_independent(self) -> None:
        """Test rolling on one roller does not advance another."""
        first = PercentileRoller(seed=42)
        second = PercentileRoller(seed=42)
        expected = [second.roll() for _ in range(10)]

        other = PercentileRoller(seed=99)
        for _ in range(25):
            other.roll()

        assert [first.roll() for _ in range(10)] == expected

    def test_seed_drawn_when_absent(self) -> None:
        """Test an unseeded roller records the seed it drew."""
        roller = PercentileRoller()

        assert isinstance(roller.seed, int)
        replay = PercentileRoller(seed=roller.seed)
        assert [roller.roll() for _ in range(5)] == [replay.roll() for _ in range(5)]

    def test_zero_seed_kept(self) -> None:
        """Test a seed of zero is used rather than replaced."""
        assert PercentileRoller(seed=0).seed == 0

    def test_check_bounds(self) -> None:
        """Test a zero chance always fails and a full chance always succeeds."""
        roller = PercentileRoller(seed=7)

        assert not any(roller.check(0).success for _ in range(100))
        assert all(roller.check(100).success for _ in range(100))

    def test_check_records_chance(self) -> None:
        """Test the check result carries the chance it was made against."""
        result = PercentileRoller(seed=7).check(65)

        assert result.chance == 65
        assert 1 <= result.roll <= 100
