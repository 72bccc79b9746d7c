"""Configuration and logging shared by the CLI and the auditor."""
