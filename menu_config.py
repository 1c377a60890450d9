"""
Configuration for the bookmarklet menu
"""

import os
from dataclasses import dataclass

# Load .env file
from dotenv import load_dotenv
load_dotenv()  # This will load .env from current directory or parent directories

from bookmarklet_tree import UNTITLED
from menu_projector import EMPTY_TITLE

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


def _env_bool(name: str, default: bool) -> bool:
    if name not in os.environ:
        return default
    value = os.environ[name].strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid value for {name}: {os.environ[name]!r}. Expected one of: {', '.join(TRUE_VALUES + FALSE_VALUES[:-1])}")


def _env_float(name: str, default: float) -> float:
    if name not in os.environ or not os.environ[name].strip():
        return default
    try:
        value = float(os.environ[name])
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {os.environ[name]!r}. Expected a number of seconds")
    if value < 0:
        raise ValueError(f"Invalid value for {name}: {value}. Must not be negative")
    return value


@dataclass
class MenuConfig:
    """Settings of the bookmarklet menu"""
    flat_menu: bool = False
    root_title: str = "Bookmarklets"
    empty_title: str = EMPTY_TITLE
    untitled_title: str = UNTITLED
    update_delay: float = 1.0  # seconds

    @classmethod
    def from_env(cls) -> 'MenuConfig':
        """Create config from environment variables"""
        defaults = cls()
        return cls(
            flat_menu=_env_bool('BOOKMARKLETS_FLAT_MENU', defaults.flat_menu),
            root_title=os.environ.get('BOOKMARKLETS_ROOT_TITLE') or defaults.root_title,
            empty_title=os.environ.get('BOOKMARKLETS_EMPTY_TITLE') or defaults.empty_title,
            untitled_title=os.environ.get('BOOKMARKLETS_UNTITLED_TITLE') or defaults.untitled_title,
            update_delay=_env_float('BOOKMARKLETS_UPDATE_DELAY', defaults.update_delay),
        )
