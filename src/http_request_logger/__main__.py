# SPDX-License-Identifier: Apache-2.0
from http_request_logger.main import main

main()
