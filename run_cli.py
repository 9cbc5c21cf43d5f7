"""
Run the Diet Recipe Recommender CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    init        Create the database schema and seed the condition catalog
    conditions  List the medical condition catalog
    needs       Show a user's conditions and aggregated nutrient profile
    recommend   Run the recommendation pipeline for a user

Examples:
    python run_cli.py init
    python run_cli.py needs 1
    python run_cli.py recommend 1

Environment variables: see run_api.py.
"""

import logging
import os
import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app()
