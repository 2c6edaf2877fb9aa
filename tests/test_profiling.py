"""
Hot-path profiling helper tests.

Profiling is switched on by the PHPLIT_PROFILE environment variable at import
time, so these tests only rely on behavior common to both modes.
"""

import phplit


def test_hot_path_stats_roundtrip() -> None:
    phplit.clear_hot_path_stats()
    phplit.parse("['a' => [1, 2.5, 'x']]")
    stats = phplit.get_hot_path_stats()

    if phplit.PROFILE_HOT_PATHS:
        assert stats["parse_document"].call_count == 1
        assert stats["parse_array"].call_count == 2
        assert stats["scan_string"].call_count == 2
    else:
        assert stats == {}

    phplit.clear_hot_path_stats()
    assert phplit.get_hot_path_stats() == {}


def test_hot_path_stats_record_call() -> None:
    stats = phplit.HotPathStats("scan_number")
    stats.record_call(100, chars=3)
    stats.record_call(50)
    assert stats.call_count == 2
    assert stats.total_time_ns == 150
    assert stats.chars_processed == 3
