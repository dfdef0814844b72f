"""
Record aggregation for pyflagstat.
Collapses a stream of alignment records into a frequency table keyed by
(flag, same chromosome, high quality), serially or over a worker pool.
"""

import logging
import multiprocessing
from collections import Counter, deque
from itertools import islice
from typing import Iterable, Iterator, List

import numpy as np
import pandas as pd

from pyflagstat.core.models import AlignmentRecordView, ClassificationKey
from pyflagstat.utils.logging import worker_configurer

logger = logging.getLogger(__name__)

FrequencyTable = Counter


def aggregate(records: Iterable[AlignmentRecordView]) -> FrequencyTable:
    """
    Count occurrences of each ClassificationKey in a single pass.

    :param records: Alignment record views, in any order.
    :return: Counter mapping ClassificationKey to occurrence count.
    """
    table = Counter()
    for record in records:
        table[ClassificationKey.from_record(record)] += 1
    return table


def merge_tables(*tables: FrequencyTable) -> FrequencyTable:
    """
    Sum several frequency tables key by key.

    :param tables: Tables built from disjoint sets of records.
    :return: A new table holding the combined counts.
    """
    merged = Counter()
    for table in tables:
        merged.update(table)
    return merged


def _chunked(records: Iterable[AlignmentRecordView], chunk_size: int) -> Iterator[List[AlignmentRecordView]]:
    it = iter(records)
    while True:
        chunk = list(islice(it, chunk_size))
        if not chunk:
            return
        yield chunk


def aggregate_parallel(
    records: Iterable[AlignmentRecordView],
    threads: int = 1,
    chunk_size: int = 100000,
    log_queue=None
) -> FrequencyTable:
    """
    Aggregate records by splitting the stream into chunks, building a table
    per chunk in a worker process and merging the partial tables.

    The stream itself is consumed in the calling process, so any error the
    record source raises surfaces here unchanged.

    :param records: Alignment record views.
    :param threads: Number of worker processes. 1 or less aggregates serially.
    :param chunk_size: Number of records sent to a worker at once.
    :param log_queue: Optional logging queue from setup_logging for the workers.
    :return: The merged frequency table.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if threads <= 1:
        return aggregate(records)

    initializer = worker_configurer if log_queue is not None else None
    initargs = (log_queue,) if log_queue is not None else ()

    table = Counter()
    num_chunks = 0
    with multiprocessing.Pool(threads, initializer=initializer, initargs=initargs) as pool:
        # Bound the number of chunks in flight so memory tracks the key space
        pending = deque()
        for chunk in _chunked(records, chunk_size):
            pending.append(pool.apply_async(aggregate, (chunk,)))
            num_chunks += 1
            if len(pending) >= threads * 2:
                table.update(pending.popleft().get())
        while pending:
            table.update(pending.popleft().get())

    logger.debug(f"Aggregated {num_chunks} chunks into {len(table)} distinct keys")
    return table


def frequency_table_frame(table: FrequencyTable) -> pd.DataFrame:
    """
    Render a frequency table as a DataFrame sorted by key.

    :param table: Frequency table from aggregate().
    :return: DataFrame with columns flag, same_chromosome, high_quality, count.
    """
    columns = ['flag', 'same_chromosome', 'high_quality', 'count']
    rows = [
        (key.flag, key.same_chromosome, key.high_quality, count)
        for key, count in table.items()
    ]
    df = pd.DataFrame(rows, columns=columns)
    df = df.astype({
        'flag': np.uint16,
        'same_chromosome': bool,
        'high_quality': bool,
        'count': np.uint64
    })
    return df.sort_values(by=['flag', 'same_chromosome', 'high_quality']).reset_index(drop=True)
