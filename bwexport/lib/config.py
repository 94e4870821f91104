"""Per-run configuration read from the environment."""
from __future__ import annotations
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional
from config.settings import (
	ENV_ENC_PASS, ENV_ENC_VAULT, ENV_EXPORT_DIR, ENV_SESSION, ENV_KEEP_SESSION,
	ENV_BW_CLI, ENV_GPG_CLI, DEFAULT_BW_CLI, DEFAULT_GPG_CLI
)

@dataclass(frozen=True)
class ExportConfig:
	enc_pass: Optional[str] = None
	enc_vault: bool = False
	export_dir: Path = Path('.')
	session: Optional[str] = None
	keep_session: bool = False
	bw_bin: str = DEFAULT_BW_CLI
	gpg_bin: str = DEFAULT_GPG_CLI

	@classmethod
	def from_env(cls, environ: Mapping[str, str] | None = None) -> 'ExportConfig':
		"""Build from environment variables; flags count as set for any non-empty value."""
		env = os.environ if environ is None else environ
		return cls(
			enc_pass=env.get(ENV_ENC_PASS) or None,
			enc_vault=bool(env.get(ENV_ENC_VAULT)),
			export_dir=Path(env.get(ENV_EXPORT_DIR) or '.'),
			session=env.get(ENV_SESSION) or None,
			keep_session=bool(env.get(ENV_KEEP_SESSION)),
			bw_bin=env.get(ENV_BW_CLI) or DEFAULT_BW_CLI,
			gpg_bin=env.get(ENV_GPG_CLI) or DEFAULT_GPG_CLI,
		)

	def merged(self, **overrides) -> 'ExportConfig':
		return replace(self, **{k: v for k, v in overrides.items() if v is not None})
