import random
from collections import Counter
from dataclasses import fields

import pytest
from pyflagstat.core.models import ClassificationKey, CounterSet, SamFlag
from pyflagstat.core.aggregation import merge_tables
from pyflagstat.core.classification import classify, classify_key, classify_parallel

PAIRING_COUNTERS = ['read1', 'read2', 'properpair', 'bothmapped', 'singleton', 'different_chrom', 'hq_different_chrom']


def all_keys():
    for flag in range(1 << 16):
        for same_chrom in (True, False):
            for hq in (True, False):
                yield ClassificationKey(flag, same_chrom, hq)


def random_table(seed, size=200):
    rng = random.Random(seed)
    table = Counter()
    for _ in range(size):
        key = ClassificationKey(rng.randrange(1 << 12), rng.random() < 0.5, rng.random() < 0.5)
        table[key] += rng.randint(1, 50)
    return table


def test_unpaired_mapped_primary():
    counters = classify(Counter({ClassificationKey(0x0, True, True): 1}))
    assert counters == CounterSet(total=1, mapped=1)


def test_proper_pair_read1():
    key = ClassificationKey(SamFlag.PAIRED | SamFlag.PROPER_PAIR | SamFlag.READ1, True, True)
    counters = classify(Counter({key: 1}))
    assert counters == CounterSet(total=1, mapped=1, paired=1, read1=1, properpair=1, bothmapped=1)
    assert counters.different_chrom == 0


def test_singleton_skips_different_chrom():
    # Mate unmapped and on a different reference: still only a singleton
    key = ClassificationKey(SamFlag.PAIRED | SamFlag.MATE_UNMAPPED, False, False)
    counters = classify(Counter({key: 1}))
    assert counters.paired == 1
    assert counters.singleton == 1
    assert counters.bothmapped == 0
    assert counters.different_chrom == 0
    assert counters.hq_different_chrom == 0


def test_secondary_takes_precedence_over_supplementary():
    key = ClassificationKey(SamFlag.SECONDARY | SamFlag.SUPPLEMENTARY, True, True)
    counters = classify(Counter({key: 1}))
    assert counters.secondary == 1
    assert counters.supplementary == 0


def test_counts_are_weighted():
    key = ClassificationKey(SamFlag.PAIRED | SamFlag.READ2, False, True)
    table = Counter({key: 100})
    assert len(table) == 1

    counters = classify(table)
    assert counters.total == 100
    assert counters.paired == 100
    assert counters.read2 == 100
    assert counters.bothmapped == 100
    assert counters.different_chrom == 100
    assert counters.hq_different_chrom == 100


def test_different_chrom_low_quality():
    key = ClassificationKey(SamFlag.PAIRED, False, False)
    c = classify_key(key)
    assert c.different_chrom == 1
    assert c.hq_different_chrom == 0


@pytest.mark.parametrize("extra", [SamFlag.SECONDARY, SamFlag.SUPPLEMENTARY, SamFlag.SECONDARY | SamFlag.SUPPLEMENTARY])
def test_non_primary_never_counts_pairing(extra):
    flag = SamFlag.PAIRED | SamFlag.PROPER_PAIR | SamFlag.READ1 | SamFlag.READ2 | extra
    for same_chrom in (True, False):
        c = classify_key(ClassificationKey(flag, same_chrom, True))
        assert c.paired == 0
        for name in PAIRING_COUNTERS:
            assert getattr(c, name) == 0


def test_unmapped_paired_counts_only_pair_membership():
    flag = SamFlag.PAIRED | SamFlag.UNMAPPED | SamFlag.PROPER_PAIR | SamFlag.READ1
    c = classify_key(ClassificationKey(flag, False, True))
    assert c == CounterSet(total=1, paired=1, read1=1)


def test_duplicate_and_qc_fail_are_flat():
    flag = SamFlag.DUPLICATE | SamFlag.QC_FAIL | SamFlag.PAIRED | SamFlag.PROPER_PAIR
    c = classify_key(ClassificationKey(flag, True, True))
    assert c == CounterSet(total=1, qc_failed=1, duplicate=1, mapped=1, paired=1, properpair=1, bothmapped=1)


def test_empty_table():
    assert classify(Counter()) == CounterSet()


def test_order_independence():
    table = random_table(1)
    entries = list(table.items())
    expected = classify(table)

    for seed in range(5):
        random.Random(seed).shuffle(entries)
        assert classify(Counter(dict(entries))) == expected


def test_additivity():
    t1 = random_table(2)
    t2 = random_table(3)
    merged = classify(merge_tables(t1, t2))
    assert merged == classify(t1) + classify(t2)


def test_parallel_matches_serial():
    table = random_table(4, size=500)
    assert classify_parallel(table, threads=3) == classify(table)
    assert classify_parallel(table, threads=1) == classify(table)


def test_invariants_over_every_key():
    # Every possible key once: the totals must satisfy the containment rules
    for key in all_keys():
        c = classify_key(key)
        assert c.total == 1
        assert c.bothmapped + c.singleton <= 1
        if c.paired and c.mapped:
            assert c.bothmapped + c.singleton == 1
        assert c.different_chrom <= c.bothmapped <= c.paired
        assert c.hq_different_chrom <= c.different_chrom
        assert c.supplementary + c.secondary <= 1
        for f in fields(c):
            assert getattr(c, f.name) in (0, 1)


def test_subset_containment_on_aggregate():
    table = random_table(5, size=1000)
    c = classify(table)
    assert c.total == sum(table.values())
    assert c.different_chrom <= c.bothmapped <= c.paired <= c.total
    assert c.hq_different_chrom <= c.different_chrom
    assert c.read1 <= c.paired
    assert c.read2 <= c.paired
