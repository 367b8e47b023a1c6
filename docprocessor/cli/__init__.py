"""Command-line tools for the document processor.

- ``python -m docprocessor.cli`` / ``docprocessor`` : process a file, search
  the key-value index, or print index statistics without the web server.
"""
