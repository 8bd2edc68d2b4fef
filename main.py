"""
Container entrypoint for the markdown-ZIP to DOCX conversion service.
Imports the FastAPI app from server.py so uvicorn can find it as main:app
(see Dockerfile: uvicorn main:app --port 8080).
"""

from server import app

__all__ = ["app"]
