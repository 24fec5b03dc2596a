# SPDX-License-Identifier: Apache-2.0
"""
Integration tests for the http-request-logger server.

These tests use pytest-asyncio and httpx.AsyncClient to drive the ASGI app
in-process, with sinks writing to in-memory buffers.
"""
