"""Services: release orchestration and module synchronization."""
