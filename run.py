#!/usr/bin/env python3
"""Replay a captured agent transcript through the status parser.

Usage:
    python run.py TRANSCRIPT [--config config.yaml] [--chunk-size N] [--screen] [--debug] [--trace] [--verbose]
"""
import sys

from agent_status.replay import main

if __name__ == "__main__":
    sys.exit(main())
