"""
Main entry point for the pyflagstat command-line tool.
Streams an alignment file, aggregates its records by flag, same-chromosome
and mapping-quality class, and reports the flagstat counters.
"""

import argparse
import logging
import sys
from pathlib import Path

from pyflagstat.core.aggregation import aggregate_parallel
from pyflagstat.core.classification import classify_parallel
from pyflagstat.exceptions import InvalidInput, SourceReadError
from pyflagstat.exit_codes import EXIT_ERROR, EXIT_IOERR, EXIT_NOINPUT, EXIT_SUCCESS
from pyflagstat.parsers.alignment_parser import read_alignment_records
from pyflagstat.report.report_writer import format_counters, write_counters_tsv, write_frequency_table
from pyflagstat.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="pyflagstat: samtools flagstat style counters for SAM/BAM/CRAM files.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("-i", "--input", help="The SAM/BAM/CRAM file to gather stats on")

    # Optional outputs
    parser.add_argument("-o", "--output", help="Output directory for log.txt and flagstat.tsv")
    parser.add_argument("--frequency-table", help="Write the (flag, same chromosome, high quality) frequency table to this TSV")

    # Configurable
    parser.add_argument("-t", "--threads", type=int, default=1, help="Number of worker processes")
    parser.add_argument("--chunk-size", type=int, default=100000, help="Records per worker chunk when aggregating")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log DEBUG messages to the console")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    output_dir = Path(args.output) if args.output else None
    log_queue, log_listener = setup_logging(output_dir, args.verbose)

    logger = logging.getLogger(__name__)
    exit_code = EXIT_SUCCESS
    try:
        if not args.input:
            raise InvalidInput("an input alignment file must be specified with --input")
        if args.threads < 1:
            raise InvalidInput(f"--threads must be at least 1, got {args.threads}")
        if args.chunk_size < 1:
            raise InvalidInput(f"--chunk-size must be at least 1, got {args.chunk_size}")

        logger.info(f"Reading alignments from {args.input}")
        records = read_alignment_records(args.input)
        table = aggregate_parallel(records, args.threads, args.chunk_size, log_queue)
        logger.info(f"Found {len(table)} distinct flag/chromosome/quality combinations")

        if args.frequency_table:
            write_frequency_table(table, Path(args.frequency_table))
            logger.info(f"Frequency table written to {args.frequency_table}")

        counters = classify_parallel(table, args.threads, log_queue)

        sys.stdout.write(format_counters(counters))
        sys.stdout.flush()

        if output_dir is not None:
            write_counters_tsv(counters, output_dir / "flagstat.tsv")
            logger.info(f"Results saved in {output_dir}")
    except InvalidInput as e:
        logger.error(f"Invalid input: {e}")
        exit_code = EXIT_NOINPUT
    except SourceReadError as e:
        logger.error(f"Could not read alignments: {e}")
        exit_code = EXIT_IOERR
    except Exception as e:
        logger.error(f"Critical failure: {e}")
        exit_code = EXIT_ERROR
    finally:
        log_listener.stop()

    if exit_code != EXIT_SUCCESS:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
