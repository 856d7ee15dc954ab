#!/usr/bin/env python3
"""
Main execution module for the clinical attachment migrator
"""

from attachment_migrator.cli.commands import main

if __name__ == "__main__":
    main()
