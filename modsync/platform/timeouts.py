from __future__ import annotations

# Local git operations (status, rev-parse, tag, checkout, branch, merge)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (clone, fetch, push)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# gh release create
GH_TIMEOUT_SECONDS = 2 * 60.0

# composer require / composer normalize
COMPOSER_TIMEOUT_SECONDS = 5 * 60.0

# Simulated command duration in dry-run mode (min, max)
DRY_RUN_DELAY_SECONDS = (0.01, 0.1)
