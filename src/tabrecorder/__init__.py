"""Tab and microphone audio finalization, catalog and live effects preview."""
