"""bw-export: encrypted offline backups of a Bitwarden vault and its attachments."""

__version__ = "0.1.0"
