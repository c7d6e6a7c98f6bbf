"""
Tessa Backend — Middleware Package
====================================

Middleware Chain (order matters):
    Request → [Security Headers] → [Rate Limit] → [Request ID] → [Logging]
            → [GZip] → [CORS] → Route

    1. Security Headers outermost: every response is hardened, 429s included
    2. Rate Limit: reject abusive clients before any work
    3. Request ID: correlation id for every log line and the response header
    4. Logging: method, path, status and duration, tagged with the request id
"""
