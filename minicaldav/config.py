import json
import logging
import os
from typing import Any
from typing import Dict
from typing import Optional

import yaml

"""
Reading connection parameters from a configuration file.

The file is JSON or YAML, with one section per server:

    {
        "default": {
            "caldav_url": "https://cal.example.com/dav/",
            "caldav_user": "alice",
            "caldav_pass": "secret"
        },
        "work": {
            "inherits": "default",
            "caldav_url": "https://cal.example.com/dav/calendars/alice/work/"
        }
    }
"""

log = logging.getLogger("minicaldav")

## accepted spellings -> DAVClient parameter
CONNECTION_KEYS: Dict[str, str] = {
    "url": "url",
    "user": "username",
    "username": "username",
    "pass": "password",
    "password": "password",
    "proxy": "proxy",
    "timeout": "timeout",
    "ssl_verify_cert": "ssl_verify_cert",
}


def normalize_connection_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Maps keys like ``user`` and ``pass`` to DAVClient parameter names,
    and drops anything DAVClient does not know about.
    """
    ret = {}
    for key, value in params.items():
        if key not in CONNECTION_KEYS or value is None or value == "":
            continue
        key = CONNECTION_KEYS[key]
        if key == "timeout":
            value = float(value)
        elif key == "ssl_verify_cert" and isinstance(value, str):
            value = value.lower() not in ("0", "false", "no", "off")
        ret[key] = value
    return ret


def connection_params_from_section(section: Dict[str, Any]) -> Dict[str, Any]:
    return normalize_connection_params(
        {k[7:]: v for k, v in section.items() if k.startswith("caldav_")}
    )


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    """
    Returns the section, with everything it inherits (recursively)
    filled in below it.
    """
    return _config_section(config, section, set())


def _config_section(config, section, seen):
    if section in seen:
        raise ValueError("inheritance loop in config section %r" % section)
    seen.add(section)
    if section in config and "inherits" in config[section]:
        ret = _config_section(config, config[section]["inherits"], seen)
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Reads a JSON or YAML config file.  Without a file name, the usual
    locations are searched and the first file found is used.

    Returns {} if the file doesn't exist or can't be parsed, and None
    if no file name was given and nothing was found.
    """
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config"
        for config_file in (
            f"{cfgdir}/minicaldav/calendar.conf",
            f"{cfgdir}/minicaldav/calendar.yaml",
            f"{cfgdir}/minicaldav/calendar.json",
            f"{cfgdir}/calendar.conf",
            "/etc/minicaldav/calendar.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        with open(fn, "rb") as config_file:
            content = config_file.read()
    except FileNotFoundError:
        log.info("no config file found at %s", fn)
        return {}

    try:
        cfg = json.loads(content)
    except json.decoder.JSONDecodeError:
        try:
            cfg = yaml.safe_load(content)
        except yaml.YAMLError:
            log.error(
                f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax.",
                exc_info=True,
            )
            return {}
    if not isinstance(cfg, dict):
        log.error(f"config file {fn} should contain a mapping of sections")
        return {}
    return cfg
