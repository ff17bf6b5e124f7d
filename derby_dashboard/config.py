import json
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(BASE_DIR, "configs", "program_balance.json")
CONFIG_FILE_PATH = os.getenv("DERBY_PROGRAM_CONFIG", DEFAULT_CONFIG_PATH)

_TRUTHY = ("1", "true", "yes", "on")


def load_config(path=None):
    """
    Reads the program balance JSON (race distances, roster size, horse name
    and color pools, outcome bounds, animation constants).

    DERBY_PROGRAM_CONFIG points at an alternate file. A missing or malformed
    file yields None, and every engine constant then uses the built-in
    default its module passes to get_config().
    """
    path = path or CONFIG_FILE_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        print(f"FATAL ERROR: Program balance file not found at {path}; using built-in defaults.")
    except (OSError, ValueError) as e:
        print(f"FATAL ERROR: Could not parse program balance file {path}: {e}")
    return None

# Engine modules read their constants at import, so the file is loaded once here.
BALANCE_CONFIG = load_config()


def get_config(key_path, default=None):
    """
    Looks up a 'section.key' path in the balance file, e.g.
    get_config('program.horses_per_session', 10). Falls back to `default`
    when no file is loaded or the path is absent.
    """
    if not BALANCE_CONFIG:
        return default

    node = BALANCE_CONFIG
    for key in key_path.split('.'):
        if not isinstance(node, dict) or key not in node:
            print(f"Warning: program balance has no '{key_path}' (missing '{key}'); using {default!r}")
            return default
        node = node[key]
    return node


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def frame_rate() -> int:
    """Frames per second for live playback; DERBY_FRAME_RATE wins over the config file."""
    env_value = os.getenv("DERBY_FRAME_RATE")
    if env_value is not None:
        try:
            return max(1, int(env_value))
        except ValueError:
            print(f"Warning: ignoring invalid DERBY_FRAME_RATE={env_value!r}")
    return int(get_config("animation.frame_rate", 60))


VERBOSE_DEFAULT = env_flag("DERBY_VERBOSE")
