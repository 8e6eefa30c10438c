"""FinTrack investments backend."""
