"""Document AI processor: text extraction, key-value indexing and chat over documents."""
