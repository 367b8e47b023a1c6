"""Allow ``python -m docprocessor.cli`` execution."""

from docprocessor.cli.documents import main

main()
