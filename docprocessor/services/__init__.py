"""Business-logic services.

- **ocr_service** -- ordered OCR provider fallback chain for images.
- **text_extraction** -- PDF text layer / PDF OCR / image OCR routing.
- **kv_gateway** -- logged entry point to the selected key-value backend.
- **indexing_engine** -- denormalized key-value index and its searches.
- **chat_orchestrator** -- bounded document context and shaped chat answers.
- **document_service** -- upload processing and document CRUD.
- **chat_service** -- chat queries and transcript persistence.
"""
