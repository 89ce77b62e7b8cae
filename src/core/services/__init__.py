"""Orchestration services (routing, chat and reachability flows)."""
