#!/usr/bin/env python3
"""
Clinical attachment migrator for Supabase storage
"""

__version__ = "0.1.0"

from attachment_migrator.core.config import MigrationConfig, load_config

# Import the main classes and functions for easier access
from attachment_migrator.core.migrator import AttachmentMigrator
from attachment_migrator.core.state import RunSummary
from attachment_migrator.types import ReconcileOutcome, ReconcileResult
from attachment_migrator.utils.keys import normalize_key
