#!/usr/bin/env python
"""Script to run the todo API server."""
from todo_api.main import run

if __name__ == "__main__":
    run()
