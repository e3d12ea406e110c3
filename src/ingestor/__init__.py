# ── src/ingestor/__init__.py ─────────────────────────────────────────────────
"""
Core of the log ingestor: credentials, tokens, access gates, ingestion and
the query engine. Nothing in here imports the routers; the FastAPI layer in
`routers/` and `main.py` wires these pieces together at startup.
"""
