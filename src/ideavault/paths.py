"""Path management and vault structure for Idea Vault."""

from pathlib import Path

from .config import VaultConfig


class VaultPaths:
    """Manages paths within the Idea Vault directory structure."""

    def __init__(self, vault_root: Path):
        """Initialize vault paths from root directory.

        Args:
            vault_root: Root directory of the vault
        """
        self.root = vault_root

        # Top-level directories
        self.state = vault_root / "state"
        self.system = vault_root / "system"
        self.certificates = vault_root / "certificates"

        # State files
        self.db_file = self.state / "ideas.sqlite"

        # System files
        self.config_file = self.system / "config.yaml"
        self.ledger_file = self.system / "ledger.jsonl"

    @classmethod
    def from_config(cls, config: VaultConfig) -> "VaultPaths":
        """Create VaultPaths from a VaultConfig."""
        return cls(config.vault_path)

    def get_all_directories(self) -> list[Path]:
        """Get list of all directories that should exist in the vault."""
        return [
            self.state,
            self.system,
            self.certificates,
        ]

    def certificate_file(self, idea_id: str) -> Path:
        """Default export path for an idea's proof certificate."""
        return self.certificates / f"creativevault-proof-{idea_id}.json"

    def is_initialized(self) -> bool:
        return self.system.exists() and self.config_file.exists()
