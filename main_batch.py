#!/usr/bin/env python3
"""
captionfmt Batch Processing Entry Point

Converts every timedtext XML file in a directory into the configured
export formats.
"""

from captionfmt.batch import run_batch_processing

if __name__ == "__main__":
    run_batch_processing()
