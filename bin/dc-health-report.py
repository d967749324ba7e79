#!/usr/bin/env python3
"""
DC Health Report - Launcher
Run the health report from a checkout without installing it.

Usage:
    python bin/dc-health-report.py --skip-email
    python bin/dc-health-report.py --create-password-file 'S3cret!'
"""

import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dchealth.cli import main

if __name__ == '__main__':
    sys.exit(main())
