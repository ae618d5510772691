"""auditpager constants."""

from __future__ import annotations

# Pager resolution
PAGER_ENV_VAR = "PAGER"
FALLBACK_PAGERS = ("less", "more")
# Seconds a failed pipe write waits for the pager exit to be observed
PAGER_EXIT_GRACE_S = 1.0

# Output layout
DEFAULT_TERMINAL_WIDTH = 80
FALLBACK_PAGER_LINE_COUNT = 100
COLUMN_PADDING = 2

# Audit table column maxima (None = no maximum)
AUTHOR_MAX_WIDTH = 32
EVENT_MAX_WIDTH = 22
IP_ADDRESS_MAX_WIDTH = 45
DATE_MAX_WIDTH = 22

# Event sources
DEFAULT_PER_PAGE = 20
HTTP_TIMEOUT_S = 30
TOKEN_ENV_VAR = "AUDITPAGER_TOKEN"
USER_AGENT = "auditpager"
