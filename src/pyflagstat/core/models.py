"""
Data models for pyflagstat.
Defines the SAM flag bits, the record view supplied by readers,
the classification key and the final set of counters.
"""

from dataclasses import dataclass, fields
from enum import IntFlag
from typing import Dict

# Mapping quality at or above which a mapping counts as high quality
HIGH_QUALITY_MAPQ = 5

# Reference id pysam reports for records without a reference
UNMAPPED_REFERENCE_ID = -1


class SamFlag(IntFlag):
    """
    Bits of the SAM FLAG field used by flagstat.
    """
    PAIRED = 0x1
    PROPER_PAIR = 0x2
    UNMAPPED = 0x4
    MATE_UNMAPPED = 0x8
    READ1 = 0x40
    READ2 = 0x80
    SECONDARY = 0x100
    QC_FAIL = 0x200
    DUPLICATE = 0x400
    SUPPLEMENTARY = 0x800


@dataclass
class AlignmentRecordView:
    """
    The subset of an alignment record needed for flag statistics.
    """
    flag: int
    reference_id: int = UNMAPPED_REFERENCE_ID
    mate_reference_id: int = UNMAPPED_REFERENCE_ID
    mapping_quality: int = 0


@dataclass(frozen=True)
class ClassificationKey:
    """
    Everything the classifier looks at for a single record.
    Records with equal keys land in exactly the same counters.
    """
    flag: int
    same_chromosome: bool
    high_quality: bool

    @classmethod
    def from_record(cls, record: AlignmentRecordView) -> "ClassificationKey":
        return cls(
            flag=record.flag,
            same_chromosome=record.reference_id == record.mate_reference_id,
            high_quality=record.mapping_quality >= HIGH_QUALITY_MAPQ
        )

    def has(self, bit: SamFlag) -> bool:
        return (self.flag & bit) != 0


@dataclass
class CounterSet:
    """
    The fourteen flagstat counters. Field order is the report order.
    """
    total: int = 0
    qc_failed: int = 0
    secondary: int = 0
    supplementary: int = 0
    duplicate: int = 0
    mapped: int = 0
    paired: int = 0
    read1: int = 0
    read2: int = 0
    properpair: int = 0
    bothmapped: int = 0
    singleton: int = 0
    different_chrom: int = 0
    hq_different_chrom: int = 0

    def __add__(self, other: "CounterSet") -> "CounterSet":
        if not isinstance(other, CounterSet):
            return NotImplemented
        return CounterSet(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
