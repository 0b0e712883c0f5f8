"""Client side: remote API client, project settings, sync engine and CLI."""
