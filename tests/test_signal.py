"""
Tests for the signal helpers.
"""

import pytest

from core.services.signal import average, population_std, smooth


class TestSmooth:

    @pytest.mark.parametrize("values", [[], [1.0], [1.0, 5.0], [3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0]])
    def test_preserves_length(self, values):
        assert len(smooth(values)) == len(values)

    def test_constant_sequence_is_unchanged(self):
        assert smooth([0.7] * 12) == pytest.approx([0.7] * 12)

    def test_edges_average_existing_neighbours_only(self):
        result = smooth([0.0, 3.0, 6.0, 9.0])
        assert result[0] == pytest.approx(1.5)
        assert result[1] == pytest.approx(3.0)
        assert result[3] == pytest.approx(7.5)

    def test_wider_window(self):
        result = smooth([0.0, 0.0, 10.0, 0.0, 0.0], window=5)
        assert result[2] == pytest.approx(2.0)
        assert result[0] == pytest.approx(10.0 / 3)


class TestStatistics:

    def test_average_of_empty_is_zero(self):
        assert average([]) == 0.0

    def test_average(self):
        assert average([1.0, 2.0, 6.0]) == pytest.approx(3.0)

    @pytest.mark.parametrize("values", [[], [4.2], [2.5] * 10])
    def test_std_is_zero_for_degenerate_input(self, values):
        assert population_std(values) == 0.0

    def test_std_divides_by_n(self):
        # mean 5, squared deviations sum to 32 over 8 samples
        assert population_std([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
