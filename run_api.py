#!/usr/bin/env python3

"""
Run the FastAPI server for the player directory autocomplete endpoints.
"""

import uvicorn
import sys
import os

# Add the src directory to the Python path
sys.path.append(os.path.join(os.path.abspath(os.path.dirname(__file__)), "src"))

from player_directory.api import app

if __name__ == "__main__":
    print("Starting Player Directory API server...")
    print("Available endpoints:")
    print("  GET  /                                  - API info")
    print("  GET  /api/autocomplete                  - Search player names")
    print("  POST /api/warm                          - Start loading a version")
    print("  GET  /api/status                        - Load progress")
    print("  GET  /api/directory/{version}/players   - Directory pages")
    print("  GET  /api/stats                         - Service statistics")
    print("  GET  /api/health                        - Health check")
    print()
    print("Example curl commands:")
    print("  curl 'http://localhost:8000/api/autocomplete?q=bell&limit=5'")
    print("  curl 'http://localhost:8000/api/autocomplete?q=j.&version=FC26'")
    print("  curl 'http://localhost:8000/api/status?version=FC26'")
    print()

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
