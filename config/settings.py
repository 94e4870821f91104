"""Project configuration settings.

Constants shared by the export pipeline. Per-run values (passphrase,
session, output directory) are read from the environment at call time,
see `bwexport.lib.config.ExportConfig`.
"""

# Environment keys
ENV_ENC_PASS = "BW_ENC_PASS"
ENV_ENC_VAULT = "BW_ENC_VAULT"
ENV_EXPORT_DIR = "BW_EXPORT_DIR"
ENV_SESSION = "BW_SESSION"
ENV_KEEP_SESSION = "BW_KEEP_SESSION"
ENV_BW_CLI = "BW_CLI"
ENV_GPG_CLI = "GPG_CLI"
ENV_LOG_LEVEL = "BW_EXPORT_LOG_LEVEL"

# External tools
DEFAULT_BW_CLI = "bw"
DEFAULT_GPG_CLI = "gpg"
CIPHER_ALGO = "AES256"

# Staging layout
BUILD_DIR_NAME = "raw"
ATTACHMENTS_DIR_NAME = "attachments"
VAULT_FILE_NAME = "vault.json"
STAGING_MODE = 0o700

# Artifact naming
ARCHIVE_PREFIX = "bw_export"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
ARCHIVE_SUFFIX = ".tar.gz"
ENCRYPTED_SUFFIX = ".gpg"

# Exit codes
EXIT_NOT_CONFIGURED = 255
EXIT_NO_SESSION = 254
EXIT_PASSPHRASE_MISMATCH = 253
EXIT_INTERRUPTED = 0

# Logging
LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

__all__ = [
	'ENV_ENC_PASS','ENV_ENC_VAULT','ENV_EXPORT_DIR','ENV_SESSION','ENV_KEEP_SESSION',
	'ENV_BW_CLI','ENV_GPG_CLI','ENV_LOG_LEVEL','DEFAULT_BW_CLI','DEFAULT_GPG_CLI','CIPHER_ALGO',
	'BUILD_DIR_NAME','ATTACHMENTS_DIR_NAME','VAULT_FILE_NAME','STAGING_MODE',
	'ARCHIVE_PREFIX','TIMESTAMP_FORMAT','ARCHIVE_SUFFIX','ENCRYPTED_SUFFIX',
	'EXIT_NOT_CONFIGURED','EXIT_NO_SESSION','EXIT_PASSPHRASE_MISMATCH','EXIT_INTERRUPTED',
	'LOG_LEVEL','LOG_FORMAT'
]
