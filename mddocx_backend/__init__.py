"""Backend for the markdown-archive to DOCX conversion service.

Route handlers in server.py stay thin; this package holds:
- per-request scratch workspace lifecycle
- ZIP extraction with Zip Slip protection
- source document lookup and the external converter call

Security note:
Scratch paths are built from a fresh UUID4 per request, never from the
client-supplied file name. Never expose filesystem paths in responses.
"""
