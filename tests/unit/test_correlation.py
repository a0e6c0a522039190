"""Tests for the latest-login correlation index."""

import itertools
from dataclasses import replace
from datetime import datetime

from akt.core.correlation import build_correlation_index, merge_correlation_indexes

FP_A = "SHA256:aaaa"
FP_B = "SHA256:bbbb"
FP_C = "SHA256:cccc"

class TestBuildCorrelationIndex:
    def test_latest_attempt_wins(self, make_attempt, make_fingerprint):
        older = make_attempt(datetime(2024, 1, 1), FP_A)
        newer = make_attempt(datetime(2024, 3, 1), FP_A)

        index = build_correlation_index([older, newer], [make_fingerprint(FP_A)])

        assert index == {FP_A: newer}

    def test_order_of_attempts_does_not_matter(self, make_attempt, make_fingerprint):
        attempts = [
            make_attempt(datetime(2024, 1, 1), FP_A),
            make_attempt(datetime(2024, 2, 1), FP_A),
            make_attempt(datetime(2024, 1, 15), FP_B),
            make_attempt(datetime(2023, 12, 1), FP_B),
        ]
        universe = [make_fingerprint(FP_A), make_fingerprint(FP_B)]

        results = [build_correlation_index(p, universe) for p in itertools.permutations(attempts)]

        assert all(r == results[0] for r in results)
        assert results[0][FP_A].timestamp == datetime(2024, 2, 1)
        assert results[0][FP_B].timestamp == datetime(2024, 1, 15)

    def test_equal_timestamp_is_order_independent(self, make_attempt, make_fingerprint):
        at = datetime(2024, 1, 1)
        attempts = [
            replace(make_attempt(at, FP_A), username="root", source="/var/log/auth.log"),
            replace(make_attempt(at, FP_A), username="deploy", source="/var/log/auth.log.1"),
            replace(make_attempt(at, FP_A), username="backup", source="/var/log/auth.log", key_offset=512),
        ]
        universe = [make_fingerprint(FP_A)]

        winners = {build_correlation_index(p, universe)[FP_A] for p in itertools.permutations(attempts)}

        assert len(winners) == 1
        assert winners.pop().username == "deploy"

    def test_equal_timestamp_merge_is_order_independent(self, make_attempt, make_fingerprint):
        at = datetime(2024, 1, 1)
        universe = [make_fingerprint(FP_A)]
        left = build_correlation_index([replace(make_attempt(at, FP_A), username="root")], universe)
        right = build_correlation_index([replace(make_attempt(at, FP_A), username="deploy")], universe)

        assert merge_correlation_indexes(left, right) == merge_correlation_indexes(right, left)

    def test_unknown_fingerprints_are_dropped(self, make_attempt, make_fingerprint):
        attempts = [
            make_attempt(datetime(2024, 1, 1), FP_A),
            make_attempt(datetime(2024, 1, 2), FP_C),
        ]
        index = build_correlation_index(attempts, [make_fingerprint(FP_A), make_fingerprint(FP_B)])
        assert set(index) == {FP_A}

    def test_algorithm_mismatch_is_no_match(self, make_attempt, make_fingerprint):
        md5 = "MD5:6e:f1:81:2f:36:aa:49:34:f4:7d:68:3a:36:7b:d6:52"
        index = build_correlation_index([make_attempt(datetime(2024, 1, 1), md5)], [make_fingerprint(FP_A)])
        assert index == {}

    def test_empty_inputs(self, make_attempt, make_fingerprint):
        assert build_correlation_index([], [make_fingerprint(FP_A)]) == {}
        assert build_correlation_index([make_attempt(datetime(2024, 1, 1), FP_A)], []) == {}

    def test_accepts_generators(self, make_attempt, make_fingerprint):
        attempts = (make_attempt(datetime(2024, 1, d), FP_A) for d in (1, 5, 3))
        universe = (make_fingerprint(fp) for fp in (FP_A,))
        index = build_correlation_index(attempts, universe)
        assert index[FP_A].timestamp == datetime(2024, 1, 5)


class TestMergeCorrelationIndexes:
    def test_merge_matches_single_pass(self, make_attempt, make_fingerprint):
        universe = [make_fingerprint(FP_A), make_fingerprint(FP_B)]
        shard_one = [
            make_attempt(datetime(2024, 1, 1), FP_A),
            make_attempt(datetime(2024, 4, 1), FP_B),
        ]
        shard_two = [
            make_attempt(datetime(2024, 2, 1), FP_A),
            make_attempt(datetime(2024, 3, 1), FP_B),
        ]

        merged = merge_correlation_indexes(
            build_correlation_index(shard_one, universe),
            build_correlation_index(shard_two, universe),
        )

        assert merged == build_correlation_index(shard_one + shard_two, universe)
        assert merged[FP_A].timestamp == datetime(2024, 2, 1)
        assert merged[FP_B].timestamp == datetime(2024, 4, 1)

    def test_merge_nothing(self):
        assert merge_correlation_indexes() == {}

    def test_merge_does_not_modify_inputs(self, make_attempt, make_fingerprint):
        universe = [make_fingerprint(FP_A)]
        first = build_correlation_index([make_attempt(datetime(2024, 1, 1), FP_A)], universe)
        second = build_correlation_index([make_attempt(datetime(2024, 2, 1), FP_A)], universe)

        merge_correlation_indexes(first, second)

        assert first[FP_A].timestamp == datetime(2024, 1, 1)
