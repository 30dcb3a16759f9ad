#!/usr/bin/env python3
"""
NewsHarvest - RSS Ingestion Pipeline
====================================

Main application entry point.

Usage:
    python main.py --help                  # Show all commands
    python main.py check-config            # Validate configuration
    python main.py ingest                  # Run one ingestion pass
"""

from newsharvest.cli import main

if __name__ == "__main__":
    main()
