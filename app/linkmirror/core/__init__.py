"""Core configuration, pattern rules, and run orchestration."""
