# SPDX-License-Identifier: Apache-2.0
"""Utility functions for http_request_logger."""

from .ids import ID_LENGTH, IdGenerator, generate_id

__all__ = [
    "ID_LENGTH",
    "IdGenerator",
    "generate_id",
]
