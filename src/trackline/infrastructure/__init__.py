"""Infrastructure layer — row sources (CSV files, published spreadsheets).

This layer depends on stdlib and third-party I/O libs (httpx, anyio).
It must never import from services, commands, or output.
"""
