"""Shared constants for featureflow."""

import re

# Lifecycle directories under the feature docs root
DEFAULT_DOCS_DIR = "feature-docs"
IDEATION_DIR = "ideation"
STAGE_DIRS = ["ready", "testing", "building", "review", "completed"]

# Legacy spelling accepted for the terminal stage
LEGACY_COMPLETED_STATUS = "done"

# Record files are NNN-slug.md, ideation entries are NNN-slug/ folders
RECORD_FILE_PATTERN = re.compile(r'^(\d{3})-.+\.md$')
IDEATION_DIR_PATTERN = re.compile(r'^(\d{3})-.+$')
RECORD_ID_PATTERN = re.compile(r'^\d{1,3}$')

# Exit codes for anything invoked as a gate by an external scheduler
EXIT_ALLOW = 0
EXIT_WARN = 1
EXIT_BLOCK = 2
EXIT_IO_ERROR = 3

STUCK_THRESHOLD_MINUTES = 30
