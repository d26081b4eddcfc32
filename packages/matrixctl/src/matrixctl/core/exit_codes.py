from __future__ import annotations

OK = 0
ERR_FAILURES = 1
ERR_CONFIG = 2
ERR_UNREPORTED = 3
ERR_ARTIFACT = 5
ERR_VALIDATION = 6
ERR_INTERNAL = 99
