# mmdbimport/config.py
"""
Process-wide defaults. Only the log level can be overridden from the
environment (MMDBIMPORT_LOG_LEVEL); everything else is set per run on the CLI.
"""

import os

DEFAULT_OUTPUT = "output.mmdb"

RECORD_SIZES = (24, 28, 32)
DEFAULT_RECORD_SIZE = 28

# Used when metadata.languages is missing or empty
DEFAULT_LANGUAGES = ("en",)

# "6" databases hold both families, so it is the fallback when nothing parses
DEFAULT_IP_VERSION = 6

LOG_LEVEL = os.getenv("MMDBIMPORT_LOG_LEVEL", "INFO").upper()
