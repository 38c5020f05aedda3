"""Host integrations for the leader engine."""
