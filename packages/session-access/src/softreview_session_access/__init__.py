"""Session Access — per-browser key/value storage for the directory client."""
