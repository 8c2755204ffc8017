"""Article loading, tracking metadata and synchronization workflow."""
