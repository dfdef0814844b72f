"""
Report output for pyflagstat.
Writes the final counters as text or TSV, and the frequency table as TSV.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from pyflagstat.core.aggregation import FrequencyTable, frequency_table_frame
from pyflagstat.core.models import CounterSet


def format_counters(counters: CounterSet) -> str:
    """
    Render the counters as one "name: value" line each, in report order.

    :param counters: Final CounterSet.
    :return: The report text, newline terminated.
    """
    return "".join(f"{name}: {value}\n" for name, value in counters.as_dict().items())


def counters_frame(counters: CounterSet) -> pd.DataFrame:
    df = pd.DataFrame(list(counters.as_dict().items()), columns=['counter', 'count'])
    return df.astype({'count': np.uint64})


def write_counters_tsv(counters: CounterSet, output_path: Path):
    """
    Write the counters as a two column TSV (counter, count).

    :param counters: Final CounterSet.
    :param output_path: Destination TSV path.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    counters_frame(counters).to_csv(output_path, sep='\t', index=False, encoding='utf-8')


def write_frequency_table(table: FrequencyTable, output_path: Path):
    """
    Write the (flag, same_chromosome, high_quality) frequency table as TSV.

    :param table: Frequency table from aggregate().
    :param output_path: Destination TSV path.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frequency_table_frame(table).to_csv(output_path, sep='\t', index=False, encoding='utf-8')
