"""Main module for post_catalog MCP server.

This module allows the server to be run as a Python module using:
python -m post_catalog

It delegates to the server application's main function.
"""

from post_catalog.server.app import main

if __name__ == "__main__":
    main()
