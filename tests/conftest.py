import pytest
import pysam
from pathlib import Path

HEADER = {
    'HD': {'VN': '1.6', 'SO': 'unsorted'},
    'SQ': [{'SN': 'chr1', 'LN': 100000}, {'SN': 'chr2', 'LN': 100000}]
}


def write_bam(path: Path, records):
    """
    Write a BAM file from (flag, reference_id, mate_reference_id, mapq) tuples.
    """
    with pysam.AlignmentFile(str(path), "wb", header=HEADER) as out:
        for i, (flag, ref_id, mate_ref_id, mapq) in enumerate(records):
            a = pysam.AlignedSegment(out.header)
            a.query_name = f"read{i}"
            a.query_sequence = "ACGTTGCAAC" * 5
            a.query_qualities = pysam.qualitystring_to_array("I" * 50)
            a.flag = flag
            a.reference_id = ref_id
            a.next_reference_id = mate_ref_id
            a.mapping_quality = mapq
            if ref_id >= 0:
                a.reference_start = 100 + i
                if not flag & 0x4:
                    a.cigarstring = "50M"
            if mate_ref_id >= 0:
                a.next_reference_start = 300 + i
            out.write(a)
    return path


@pytest.fixture
def bam_factory(tmp_path):
    def _make(records, name="test.bam"):
        return write_bam(tmp_path / name, records)
    return _make


@pytest.fixture
def example_records():
    # flag, reference_id, mate_reference_id, mapq
    return [
        (0x0, 0, -1, 60),            # unpaired, mapped
        (0x1 | 0x2 | 0x40, 0, 0, 60),  # proper pair read1
        (0x1 | 0x2 | 0x80, 0, 0, 60),  # proper pair read2
        (0x1 | 0x40, 0, 1, 30),       # mates on different chromosomes, high quality
        (0x1 | 0x80, 1, 0, 3),        # mates on different chromosomes, low quality
        (0x1 | 0x8 | 0x40, 0, 0, 20),  # singleton
        (0x1 | 0x4 | 0x80, 0, 0, 0),   # unmapped mate of the singleton
        (0x1 | 0x100 | 0x40, 1, 0, 10),  # secondary
        (0x800 | 0x400, 0, -1, 60),    # supplementary duplicate
        (0x4 | 0x200, -1, -1, 0),      # unmapped, QC failed
    ]
