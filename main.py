#!/usr/bin/env python3
"""
captionfmt Entry Point Script

This script initializes the CLI handler and runs the caption conversion.
"""

from captionfmt.cli import CLIHandler

if __name__ == "__main__":
    cli = CLIHandler()
    cli.run()
