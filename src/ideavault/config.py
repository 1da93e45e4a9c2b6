"""Configuration management for Idea Vault."""

import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .ideavault/config.toml if it exists."""
    config_file = repo_root / ".ideavault" / "config.toml"

    if not config_file.exists():
        return None

    with open(config_file, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid config file {config_file}: {e}") from e


def _section(data: Optional[dict], key: str) -> dict:
    if not isinstance(data, dict):
        return {}
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, *, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid config: {name} must be an int")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid config: {name} must be an int")


def _pick(env_name: str, repo_value: Any, default: Any) -> Any:
    """Repo config wins over environment, environment over the default."""
    if repo_value is not None:
        return repo_value
    env_value = os.environ.get(env_name)
    if env_value is not None and env_value.strip():
        return env_value
    return default


class LimitsConfig(BaseModel):
    """Input limits enforced on submission."""

    title_max_length: int = Field(default=100)
    description_max_length: int = Field(default=2000)
    attachment_ref_max_length: int = Field(default=512)
    max_tags: int = Field(default=10)
    tag_max_length: int = Field(default=32)


class FeedConfig(BaseModel):
    """Public feed paging limits."""

    default_limit: int = Field(default=20)
    max_limit: int = Field(default=50)


class VaultConfig(BaseModel):
    """Configuration for an Idea Vault instance."""

    vault_path: Path = Field(
        default_factory=lambda: Path(os.environ.get("IDEAVAULT_PATH", "./idea_vault"))
    )
    backend: Literal["sqlite", "memory"] = Field(default="sqlite")
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)

    model_config = {"frozen": False}

    @classmethod
    def from_env(cls, cli_vault_path: Optional[str] = None) -> "VaultConfig":
        """Load configuration with the following precedence:

        1. CLI --vault option (vault path only)
        2. repo-local .ideavault/config.toml (walk upward from CWD)
        3. IDEAVAULT_* environment variables
        4. Defaults

        Args:
            cli_vault_path: Vault path from CLI --vault option

        Raises:
            ValueError: If a configured value has the wrong type
        """
        data = _load_repo_config_data(_find_repo_root(Path.cwd()))
        limits = _section(data, "limits")
        feed = _section(data, "feed")
        repo_vault = data.get("vault_path") if isinstance(data, dict) else None

        if cli_vault_path:
            vault_path = Path(cli_vault_path).expanduser().resolve()
        else:
            vault_path = Path(str(_pick("IDEAVAULT_PATH", repo_vault, "./idea_vault"))).expanduser().resolve()

        backend = str(_pick("IDEAVAULT_BACKEND", data.get("backend") if isinstance(data, dict) else None, "sqlite"))
        if backend not in ("sqlite", "memory"):
            raise ValueError(f"Invalid config: backend must be 'sqlite' or 'memory', got {backend!r}")

        def limit(key: str, env: str, default: int) -> int:
            return _as_int(_pick(env, limits.get(key), default), name=f"[limits].{key}")

        def feed_value(key: str, env: str, default: int) -> int:
            return _as_int(_pick(env, feed.get(key), default), name=f"[feed].{key}")

        feed_cfg = FeedConfig(
            default_limit=feed_value("default_limit", "IDEAVAULT_FEED_DEFAULT_LIMIT", 20),
            max_limit=feed_value("max_limit", "IDEAVAULT_FEED_MAX_LIMIT", 50),
        )
        if feed_cfg.max_limit <= 0:
            raise ValueError("Invalid config: [feed].max_limit must be > 0")

        return cls(
            vault_path=vault_path,
            backend=backend,
            limits=LimitsConfig(
                title_max_length=limit("title_max_length", "IDEAVAULT_TITLE_MAX_LENGTH", 100),
                description_max_length=limit("description_max_length", "IDEAVAULT_DESCRIPTION_MAX_LENGTH", 2000),
                attachment_ref_max_length=limit("attachment_ref_max_length", "IDEAVAULT_ATTACHMENT_REF_MAX_LENGTH", 512),
                max_tags=limit("max_tags", "IDEAVAULT_MAX_TAGS", 10),
                tag_max_length=limit("tag_max_length", "IDEAVAULT_TAG_MAX_LENGTH", 32),
            ),
            feed=feed_cfg,
        )

    def to_yaml_str(self) -> str:
        """Generate YAML configuration string."""
        return f"""# Idea Vault Configuration

vault_path: {self.vault_path}
backend: {self.backend}

# Submission limits
limits:
  title_max_length: {self.limits.title_max_length}
  description_max_length: {self.limits.description_max_length}
  attachment_ref_max_length: {self.limits.attachment_ref_max_length}
  max_tags: {self.limits.max_tags}
  tag_max_length: {self.limits.tag_max_length}

# Public feed paging
feed:
  default_limit: {self.feed.default_limit}
  max_limit: {self.feed.max_limit}
"""
