"""
Alignment file reader for pyflagstat.
Streams SAM/BAM/CRAM records through pysam and exposes only the fields
the flag statistics need.
"""

import logging
from pathlib import Path
from typing import Iterator, Union

import pysam

from pyflagstat.core.models import AlignmentRecordView
from pyflagstat.exceptions import InvalidInput, SourceReadError

logger = logging.getLogger(__name__)


def to_record_view(segment: pysam.AlignedSegment) -> AlignmentRecordView:
    """
    Copy the flag statistics fields out of a pysam AlignedSegment.

    :param segment: Record yielded by pysam.AlignmentFile.
    :return: AlignmentRecordView for the record.
    """
    return AlignmentRecordView(
        flag=segment.flag,
        reference_id=segment.reference_id,
        mate_reference_id=segment.next_reference_id,
        mapping_quality=segment.mapping_quality
    )


def check_alignment_path(path: Union[str, Path]) -> Path:
    """
    Make sure the alignment file exists before streaming starts.

    :param path: Path to the SAM/BAM/CRAM file.
    :return: The path as a Path.
    """
    if path is None or str(path) == "":
        raise InvalidInput("an input alignment file must be specified")
    path = Path(path)
    if not path.is_file():
        raise InvalidInput(f"Input alignment file {path} does not exist")
    return path


def read_alignment_records(path: Union[str, Path]) -> Iterator[AlignmentRecordView]:
    """
    Yield an AlignmentRecordView for every record of an alignment file,
    in file order. The format is detected from the file contents.

    :param path: Path to the SAM/BAM/CRAM file.
    :return: Iterator of record views.
    """
    path = check_alignment_path(path)
    return _stream_records(path)


def _stream_records(path: Path) -> Iterator[AlignmentRecordView]:
    num_records = 0
    try:
        with pysam.AlignmentFile(str(path), "r", check_sq=False) as aln_file:
            for segment in aln_file:
                num_records += 1
                yield to_record_view(segment)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read alignment file {path} after {num_records} records: {e}")
        raise SourceReadError(f"Failed to read alignment file {path}: {e}", path=path) from e

    logger.debug(f"Read {num_records} records from {path}")
