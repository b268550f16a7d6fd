# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for glbench.core.statistics module."""

import math

import numpy as np
import pytest

from glbench.core.errors import EmptySeriesError
from glbench.core.statistics import SummaryStatistics, summarize


class TestSummarize:
    """Tests for summarize / SummaryStatistics.from_samples."""

    def test_odd_length(self):
        """Sorted [1,2,3,4,5]: median is index 2."""
        stats = summarize([5, 1, 3, 2, 4])

        assert stats.count == 5
        assert stats.min == 1
        assert stats.max == 5
        assert stats.mean == pytest.approx(3.0)
        assert stats.median == 3

    def test_even_length_uses_lower_middle_index(self):
        """Median of four samples is sorted[2], not the average of the middle pair."""
        stats = summarize([4, 2, 1, 3])

        assert stats.median == 3
        assert stats.median != 2.5

    def test_population_stddev(self):
        assert summarize([2, 2, 2, 2]).stddev == 0

        stats = summarize([0, 10])
        assert stats.mean == pytest.approx(5.0)
        assert stats.stddev == pytest.approx(5.0)

    def test_stddev_differs_from_sample_stddev(self, sample_timings):
        stats = summarize(sample_timings)

        assert stats.stddev == pytest.approx(float(np.std(sample_timings, ddof=0)))
        assert stats.stddev < float(np.std(sample_timings, ddof=1))

    def test_empty_raises(self):
        with pytest.raises(EmptySeriesError, match="empty samples"):
            summarize([])

    def test_empty_numpy_array_raises(self):
        with pytest.raises(EmptySeriesError):
            summarize(np.array([]))

    def test_single_sample(self):
        stats = summarize([5.0])

        assert stats.count == 1
        assert stats.stddev == 0.0
        assert stats.min == stats.max == stats.median == stats.mean == 5.0

    def test_input_order_not_mutated(self):
        series = [3.0, 1.0, 2.0]
        summarize(series)

        assert series == [3.0, 1.0, 2.0]

    def test_numpy_input_not_mutated(self):
        series = np.array([3.0, 1.0, 2.0])
        summarize(series)

        assert series.tolist() == [3.0, 1.0, 2.0]

    def test_invariants(self, sample_timings):
        stats = summarize(sample_timings)

        assert stats.min <= stats.median <= stats.max
        assert stats.min <= stats.mean <= stats.max
        assert stats.stddev >= 0
        assert stats.count == len(sample_timings)

    def test_mean_stays_within_range_for_repeated_values(self):
        stats = summarize([0.1] * 1000)

        assert stats.min <= stats.mean <= stats.max
        assert stats.mean == pytest.approx(0.1)

    def test_deterministic(self, sample_timings):
        assert summarize(sample_timings) == summarize(list(sample_timings))

    def test_values_are_plain_floats(self):
        stats = summarize(np.array([1.0, 2.0], dtype=np.float32))

        assert type(stats.mean) is float
        assert type(stats.median) is float
        assert not math.isnan(stats.stddev)


class TestSummaryStatistics:
    """Tests for the SummaryStatistics record."""

    def test_from_samples_matches_summarize(self, sample_timings):
        assert SummaryStatistics.from_samples(sample_timings) == summarize(sample_timings)

    def test_immutability(self, sample_timings):
        stats = summarize(sample_timings)

        with pytest.raises(Exception):  # frozen dataclass raises FrozenInstanceError
            stats.mean = 999.0

    def test_summary_format(self, sample_timings):
        summary = summarize(sample_timings).summary()

        assert "ms" in summary
        assert "+/-" in summary
        assert "median=" in summary
        assert "n=10" in summary

    def test_summary_custom_unit(self, sample_timings):
        assert "us" in summarize(sample_timings).summary(unit="us")

    def test_to_dict(self):
        d = summarize([0, 10]).to_dict()

        assert d == {
            "count": 2,
            "mean": 5.0,
            "stddev": 5.0,
            "min": 0.0,
            "max": 10.0,
            "median": 10.0,
        }
