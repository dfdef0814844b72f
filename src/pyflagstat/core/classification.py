"""
Flag classification for pyflagstat.
Turns a frequency table into the fourteen flagstat counters.
"""

import logging
import multiprocessing
from functools import reduce
from operator import add
from typing import List, Tuple

from pyflagstat.core.models import ClassificationKey, CounterSet, SamFlag
from pyflagstat.core.aggregation import FrequencyTable
from pyflagstat.utils.logging import worker_configurer

logger = logging.getLogger(__name__)


def classify_key(key: ClassificationKey) -> CounterSet:
    """
    Work out which counters a single record with this key contributes to.

    :param key: The record's classification key.
    :return: CounterSet with each counter set to 0 or 1.
    """
    c = CounterSet(total=1)

    if key.has(SamFlag.QC_FAIL):
        c.qc_failed = 1

    is_secondary = key.has(SamFlag.SECONDARY)
    if is_secondary:
        c.secondary = 1

    # Supplementary only counts when the record is not also secondary
    is_supplementary = key.has(SamFlag.SUPPLEMENTARY)
    if is_supplementary and not is_secondary:
        c.supplementary = 1

    # Duplicates and QC failures are flat counters, not split further
    if key.has(SamFlag.DUPLICATE):
        c.duplicate = 1

    is_mapped = not key.has(SamFlag.UNMAPPED)
    if is_mapped:
        c.mapped = 1

    # Pairing counters only look at primary paired records
    if not key.has(SamFlag.PAIRED) or is_secondary or is_supplementary:
        return c

    c.paired = 1
    if key.has(SamFlag.READ1):
        c.read1 = 1
    if key.has(SamFlag.READ2):
        c.read2 = 1

    if not is_mapped:
        return c

    if key.has(SamFlag.PROPER_PAIR):
        c.properpair = 1

    if key.has(SamFlag.MATE_UNMAPPED):
        c.singleton = 1
    else:
        c.bothmapped = 1
        if not key.same_chromosome:
            c.different_chrom = 1
            if key.high_quality:
                c.hq_different_chrom = 1

    return c


def classify_entries(entries: List[Tuple[ClassificationKey, int]]) -> CounterSet:
    """
    Fold (key, count) pairs into a CounterSet.

    :param entries: Iterable of (ClassificationKey, occurrence count).
    :return: The summed counters.
    """
    totals = CounterSet().as_dict()
    for key, count in entries:
        for name, hit in classify_key(key).as_dict().items():
            if hit:
                totals[name] += count
    return CounterSet(**totals)


def classify(table: FrequencyTable) -> CounterSet:
    """
    Classify every entry of a frequency table, weighting by its count.

    :param table: Frequency table from aggregate().
    :return: The final CounterSet.
    """
    counters = classify_entries(table.items())
    logger.debug(f"Classified {len(table)} distinct keys covering {counters.total} records")
    return counters


def classify_parallel(table: FrequencyTable, threads: int = 1, log_queue=None) -> CounterSet:
    """
    Classify a frequency table across a pool of workers.
    Entries are dealt round-robin into one partition per worker and the
    partial CounterSets are summed.

    :param table: Frequency table from aggregate().
    :param threads: Number of worker processes. 1 or less classifies serially.
    :param log_queue: Optional logging queue from setup_logging for the workers.
    :return: The final CounterSet, identical to classify(table).
    """
    if threads <= 1 or len(table) < 2:
        return classify(table)

    entries = list(table.items())
    partitions = [entries[i::threads] for i in range(threads)]
    partitions = [p for p in partitions if p]

    initializer = worker_configurer if log_queue is not None else None
    initargs = (log_queue,) if log_queue is not None else ()
    with multiprocessing.Pool(threads, initializer=initializer, initargs=initargs) as pool:
        partials = pool.map(classify_entries, partitions)

    counters = reduce(add, partials, CounterSet())
    logger.debug(f"Classified {len(table)} distinct keys over {len(partitions)} partitions")
    return counters
