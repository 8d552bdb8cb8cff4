#!/usr/bin/env python3
"""
Main entry point for the git-traffic-charts server.
"""

import sys

from git_traffic_charts.cli import main

if __name__ == "__main__":
    sys.exit(main(["server"]))
