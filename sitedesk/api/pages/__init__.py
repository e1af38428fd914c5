"""Page ownership registry endpoints."""
