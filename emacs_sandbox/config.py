import configparser
import json
import os
import pathlib
import pwd
import shutil
from dataclasses import dataclass, field
from typing import Optional, Union

from pydantic import ValidationError

from emacs_sandbox.sandbox.base import CatalogEntry


def _user_home() -> str:
    """
    Home directory from the password database.

    $HOME points at the sandbox when this tool runs inside a sandboxed
    editor, so it is only used when the user has no passwd entry.
    """
    try:
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return os.path.expanduser("~")


def _expand_user(path: str) -> str:
    """Like os.path.expanduser for the current user, ignoring $HOME."""
    if path == "~" or path.startswith("~/"):
        return _user_home() + path[1:]
    return os.path.expanduser(path)


def _default_config_dir() -> str:
    return os.environ.get(
        "EMACS_SANDBOX_CONFIG_DIR", os.path.join(_user_home(), ".emacs_sandbox")
    )


CONFIG_DIR = _default_config_dir()
CONFIG_FILE = os.path.join(CONFIG_DIR, "sandbox.cfg")
CATALOG_FILE = os.path.join(CONFIG_DIR, "catalog.json")

DEFAULT_SECTION = "sandbox"

DEFAULT_INHERITED_PATHS = [
    ".ssh",
    ".gnupg",
    ".authinfo",
    ".authinfo.gpg",
    ".netrc",
    ".gitconfig",
    ".cache",
]

# Offered when the user has no catalog.json of their own
DEFAULT_CATALOG = [
    {"repo": "https://github.com/bbatsov/prelude.git", "name": "prelude"},
    {"repo": "https://github.com/syl20bnr/spacemacs.git", "name": "spacemacs"},
    {"repo": "https://github.com/doomemacs/doomemacs.git", "name": "doom"},
    {"repo": "purcell/emacs.d", "name": "purcell"},
    {"repo": "jkitchin/scimax", "name": "scimax", "recursive": False},
    {"repo": "seagle0128/.emacs.d"},
]

_TRUE_VALUES = {"1", "true", "yes", "on"}


def get_value(key: str):
    config = configparser.ConfigParser()
    config.read(CONFIG_FILE)
    val = config.get(DEFAULT_SECTION, key, fallback=None)
    return val


def set_config_value(key: str, value: str):
    """
    Sets a config value in the persistent config file.
    """
    os.makedirs(CONFIG_DIR, exist_ok=True)
    config = configparser.ConfigParser()
    config.read(CONFIG_FILE)
    if DEFAULT_SECTION not in config:
        config[DEFAULT_SECTION] = {}
    config[DEFAULT_SECTION][key] = value
    with open(CONFIG_FILE, "w") as f:
        config.write(f)


def get_real_home() -> str:
    """
    The user's actual home directory.

    Read from the password database rather than $HOME, which points at the
    sandbox when this tool runs from inside a sandboxed editor.
    """
    val = get_value("real_home")
    if val:
        return _expand_user(val)
    return _user_home()


def get_sandbox_root() -> str:
    val = get_value("sandbox_root")
    if val:
        return _expand_user(val)
    return os.path.join(CONFIG_DIR, "sandboxes")


def get_script_dir() -> str:
    val = get_value("script_dir")
    if val:
        return _expand_user(val)
    return os.path.join(CONFIG_DIR, "bin")


def get_inherited_paths() -> list[str]:
    """
    Relative paths under the real home that every sandbox links to.
    Configured as a comma separated list under 'inherited_paths'.
    """
    val = get_value("inherited_paths")
    if val is None:
        return list(DEFAULT_INHERITED_PATHS)
    return [p.strip() for p in val.split(",") if p.strip()]


def get_picker_name() -> str:
    val = get_value("picker")
    if val and val.strip():
        return val.strip().lower()
    return "prompt"


def _search_path_without(excluded: str) -> str:
    """$PATH with every entry that resolves to `excluded` removed."""
    excluded = os.path.realpath(excluded)
    entries = os.environ.get("PATH", os.defpath).split(os.pathsep)
    kept = [p for p in entries if p and os.path.realpath(p) != excluded]
    return os.pathsep.join(kept)


def get_editor() -> str:
    """
    The emacs binary to launch. The script directory is skipped when
    searching $PATH: a persisted 'emacs' wrapper there would otherwise be
    picked up and end up calling itself.
    """
    val = get_value("editor")
    if val:
        return _expand_user(val)
    found = shutil.which("emacs", path=_search_path_without(get_script_dir()))
    return found or "emacs"


def get_default_depth() -> Optional[Union[int, str]]:
    """
    Default shallow-clone depth. 'none' disables shallow clones, a number is
    used as-is and any other token is passed through to git unchanged.
    """
    val = get_value("default_depth")
    if val is None or not val.strip():
        return 1
    val = val.strip()
    if val.lower() == "none":
        return None
    try:
        return int(val)
    except ValueError:
        return val


def get_verbose_logging() -> bool:
    val = get_value("verbose")
    if val is None:
        return False
    return str(val).strip().lower() in _TRUE_VALUES


def load_catalog(catalog_file: Optional[str] = None) -> list[CatalogEntry]:
    """
    Loads the catalog of known configuration repositories from
    ~/.emacs_sandbox/catalog.json. Falls back to the built-in catalog when the
    file does not exist; an unreadable file yields an empty catalog.
    """
    from emacs_sandbox.messaging import emit_error

    catalog_file = catalog_file or CATALOG_FILE
    try:
        if not pathlib.Path(catalog_file).exists():
            raw_entries = DEFAULT_CATALOG
        else:
            with open(catalog_file, "r") as f:
                raw_entries = json.loads(f.read())["catalog"]
        return [CatalogEntry.model_validate(entry) for entry in raw_entries]
    except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
        emit_error(f"Failed to load sandbox catalog - {str(e)}")
        return []


@dataclass(frozen=True)
class Settings:
    """Every configurable value, resolved once and handed to the runtime."""

    sandbox_root: str
    script_dir: str
    real_home: str
    editor: str
    inherited_paths: list[str] = field(default_factory=list)
    catalog: list[CatalogEntry] = field(default_factory=list)
    picker: str = "prompt"
    default_depth: Optional[Union[int, str]] = 1
    home_env_var: str = "HOME"


def load_settings() -> Settings:
    return Settings(
        sandbox_root=get_sandbox_root(),
        script_dir=get_script_dir(),
        real_home=get_real_home(),
        editor=get_editor(),
        inherited_paths=get_inherited_paths(),
        catalog=load_catalog(),
        picker=get_picker_name(),
        default_depth=get_default_depth(),
    )
