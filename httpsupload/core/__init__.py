"""Core modules of httpsupload."""
