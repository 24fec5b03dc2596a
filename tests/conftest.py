# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for unit tests.
"""

from datetime import datetime, timezone
from typing import Callable

import pytest

from http_request_logger.protocol import Record


@pytest.fixture
def record_factory() -> Callable[..., Record]:
    """Build a fully populated Record, overriding any field by keyword."""

    def make_record(**overrides) -> Record:
        values = dict(
            id="CSN0GQ0K4PLSJ1OTFH6G",
            timestamp=datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=timezone.utc),
            protocol="HTTP/1.1",
            method="POST",
            url="/submit?debug=1",
            content_length=11,
            client_address="203.0.113.5:54321",
            headers={"Content-Type": ("text/plain",), "Accept": ("a/b", "c/d")},
            body="hello world",
        )
        values.update(overrides)
        return Record(**values)

    return make_record
