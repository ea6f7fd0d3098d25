import tomllib
from pathlib import Path

from stk_shared.context.types import LoadedConfig


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Example config:
      # Trunk used when the stack store is first initialized
      trunk = "main"
    """

    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return LoadedConfig.defaults()

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    trunk = data.get("trunk")
    if trunk is not None:
        trunk = str(trunk)
    return LoadedConfig(trunk=trunk)
