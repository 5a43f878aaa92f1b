import json
import logging
import os
from typing import Any
from typing import Dict
from typing import Optional

log = logging.getLogger("davkit")

## Keyword arguments of AsyncDAVClient that may come from the
## environment or from a configuration file
CONNKEYS = frozenset(
    (
        "url",
        "username",
        "password",
        "domain",
        "auth_type",
        "ignore_cert_errors",
        "ssl_cert",
        "proxy",
        "huge_tree",
    )
)

## Values arriving as strings that should be booleans
BOOLKEYS = frozenset(("ignore_cert_errors", "huge_tree"))


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _cleanup(conf: Dict[str, Any]) -> Dict[str, Any]:
    ret = {}
    for key, value in conf.items():
        if key == "pass":
            key = "password"
        if key == "user":
            key = "username"
        if key not in CONNKEYS:
            log.debug(f"ignoring unknown connection parameter {key}")
            continue
        if key in BOOLKEYS:
            value = _to_bool(value)
        ret[key] = value
    return ret


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Read a JSON configuration file, or YAML if pyyaml is installed.

    Without a file name, a handful of standard locations are tried.
    Returns an empty dict if the given file does not exist or can't be
    parsed, None if no file was found in the standard locations.
    """
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config"
        for config_file in (
            f"{cfgdir}/davkit/davkit.conf",
            f"{cfgdir}/davkit/davkit.yaml",
            f"{cfgdir}/davkit/davkit.json",
            "/etc/davkit/davkit.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        with open(fn, "rb") as config_file:
            raw = config_file.read()
    except FileNotFoundError:
        log.debug(f"no config file found at {fn}")
        return {}

    try:
        return json.loads(raw)
    except json.decoder.JSONDecodeError:
        pass

    ## Late import.  yaml is an external module, and not included in
    ## the requirements as for now.
    try:
        import yaml
    except ImportError:
        log.error(
            f"config file {fn} exists but is not valid json, and pyyaml is not installed."
        )
        return {}
    try:
        return yaml.safe_load(raw) or {}
    except yaml.YAMLError:
        log.error(
            f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax.",
            exc_info=True,
        )
        return {}


def get_connection_params(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section_name: Optional[str] = None,
    environment: bool = True,
) -> Dict[str, Any]:
    """
    Find connection parameters.  Environment variables prepended with
    `DAVKIT_` (`DAVKIT_URL`, `DAVKIT_USERNAME`, `DAVKIT_PASSWORD`,
    `DAVKIT_DOMAIN`, ...) win over the configuration file.
    `DAVKIT_CONFIG_FILE` and `DAVKIT_CONFIG_SECTION` select the file
    and the section.  Keys in the configuration file are prepended with
    `davkit_`, like `davkit_url` and `davkit_user`.
    """
    if environment:
        conf = {}
        for conf_key in (
            x
            for x in os.environ
            if x.startswith("DAVKIT_") and not x.startswith("DAVKIT_CONFIG")
        ):
            conf[conf_key[7:].lower()] = os.environ[conf_key]
        conf = _cleanup(conf)
        if conf:
            return conf
        if not config_file:
            config_file = os.environ.get("DAVKIT_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("DAVKIT_CONFIG_SECTION")

    if check_config_file:
        cfg = read_config(config_file)
        if cfg:
            section = config_section(cfg, config_section_name or "default")
            conn_params = {}
            for k in section:
                if k.startswith("davkit_") and section[k] is not None:
                    conn_params[k[7:]] = section[k]
            return _cleanup(conn_params)

    return {}
