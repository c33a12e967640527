"""Run the API server: python -m scravo."""

from scravo.api.main import run

run()
