"""Exit codes for the pyflagstat CLI.

Following sysexits.h conventions:
- 0: Success
- 1: Unexpected failure
- 66: Input file missing or not specified
- 74: Input file could not be opened or decoded
"""

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NOINPUT = 66  # EX_NOINPUT
EXIT_IOERR = 74  # EX_IOERR
