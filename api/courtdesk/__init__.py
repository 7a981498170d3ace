"""CourtDesk: court booking back office API."""
