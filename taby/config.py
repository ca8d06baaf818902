"""
Configuration management for Taby.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/taby/config.toml) and local (taby.toml) configurations.
"""
import os
import hashlib
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field, asdict

from taby.constants import (
    CACHE_KEY_PREFIX,
    DEFAULT_CACHE_DURATION,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SEARCH_THRESHOLD,
    GIST_PROVIDERS,
)


@dataclass(frozen=True)
class GistCredentials:
    """
    Everything needed to reach one gist.

    Passed explicitly into every cache and fetch call so that distinct
    providers, gists, or tokens never share state.
    """
    provider: str
    gist_id: str
    access_token: str

    def __post_init__(self):
        if self.provider not in GIST_PROVIDERS:
            raise ValueError(
                f"Unknown gist provider '{self.provider}'. "
                f"Choose from: {', '.join(sorted(GIST_PROVIDERS))}"
            )

    @property
    def api_base(self) -> str:
        return GIST_PROVIDERS[self.provider]

    @property
    def gist_url(self) -> str:
        return f"{self.api_base}/gists/{self.gist_id}"

    def token_hash(self) -> str:
        return hashlib.sha256(self.access_token.encode("utf-8")).hexdigest()[:12]

    def cache_key(self) -> str:
        return f"{CACHE_KEY_PREFIX}_{self.provider}_{self.gist_id}_{self.token_hash()}"

    def dedup_key(self) -> Tuple[str, str, str]:
        return (self.provider, self.gist_id, self.token_hash())

    def __repr__(self) -> str:
        return f"GistCredentials(provider={self.provider!r}, gist_id={self.gist_id!r})"


@dataclass
class TabyConfig:
    """
    Taby configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (TABY_*)
    3. Local config file (./taby.toml or ./.tabyrc)
    4. User config file (~/.config/taby/config.toml)
    5. System defaults
    """

    # Remote gist
    gist_provider: str = field(default="github")  # github, gitee
    gist_id: Optional[str] = field(default=None)
    access_token: Optional[str] = field(default=None)

    # Local data
    data_dir: str = field(default="~/.taby")
    cache_duration: int = field(default=DEFAULT_CACHE_DURATION)  # seconds

    # Network settings
    timeout: int = field(default=DEFAULT_REQUEST_TIMEOUT)
    user_agent: str = field(default="Taby/0.1")

    # Search
    search_threshold: float = field(default=DEFAULT_SEARCH_THRESHOLD)
    transliteration: str = field(default="pinyin")  # pinyin, none

    # Display settings
    output_format: str = field(default="table")  # table, json, urls
    color_output: bool = field(default=True)

    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "TabyConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (overrides search)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = cls.user_config_path()
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        local_paths = [
            Path.cwd() / "taby.toml",
            Path.cwd() / ".tabyrc",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()
        config._expand_paths()

        return config

    @staticmethod
    def user_config_path() -> Path:
        return Path.home() / ".config" / "taby" / "config.toml"

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with TABY_ prefix."""
        prefix = "TABY_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                if hasattr(self, config_key):
                    current_value = getattr(self, config_key)
                    if isinstance(current_value, bool):
                        setattr(self, config_key, value.lower() in ("true", "1", "yes"))
                    elif isinstance(current_value, int):
                        setattr(self, config_key, int(value))
                    elif isinstance(current_value, float):
                        setattr(self, config_key, float(value))
                    else:
                        setattr(self, config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in paths."""
        value = self.data_dir
        if isinstance(value, str):
            self.data_dir = os.path.expanduser(os.path.expandvars(value))

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = self.user_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def credentials(self) -> GistCredentials:
        """
        Build gist credentials from this configuration.

        Raises:
            ValueError: if the gist id or access token is missing, or the
                provider is unknown
        """
        if not self.gist_id:
            raise ValueError("No gist id configured (set gist_id or TABY_GIST_ID)")
        if not self.access_token:
            raise ValueError("No access token configured (set access_token or TABY_ACCESS_TOKEN)")
        return GistCredentials(
            provider=self.gist_provider,
            gist_id=self.gist_id,
            access_token=self.access_token,
        )


# Global configuration instance
_config: Optional[TabyConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> TabyConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = TabyConfig.load(config_file)
    return _config


def init_config(config_file: Optional[Path] = None, **kwargs) -> TabyConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        config_file: Extra config file to merge
        **kwargs: Other configuration overrides

    Returns:
        Configured instance
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
