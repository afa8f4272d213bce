import logging
import sys

from typing import Dict, Any, Optional

import yaml

logger_conf = logging.getLogger('CONF')

VCConf = Dict[str, Any]

defaults = {
    "log_level": "INFO",
    "on_invalid": "skip",
    "on_duplicate": "keep-first",
}
choices = {
    "on_invalid": ("skip", "fail"),
    "on_duplicate": ("keep-first", "fail"),
}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load(path: Optional[str]) -> VCConf:
    """ Read a YAML config file; no path means an empty config """
    if path is None:
        return normalize({})
    try:
        with open(path, 'r', encoding='utf-8') as f:
            conf = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger_conf.fatal("Cannot read config %s: %s", path, e)
        sys.exit(1)
    if conf is None:
        conf = {}
    if not isinstance(conf, dict):
        logger_conf.fatal("Config %s must be a mapping", path)
        sys.exit(1)
    return normalize(conf)


def normalize(conf: VCConf) -> VCConf:
    """ Populate missing config values from defaults and check the rest """
    for key in list(conf.keys()):
        if key not in defaults:
            logger_conf.warning("Ignoring unknown config key %s", key)
            del conf[key]
    for key, value in defaults.items():
        conf.setdefault(key, value)
    level = str(conf["log_level"]).upper()
    if level not in LOG_LEVELS:
        logger_conf.fatal("Invalid log_level %s", conf["log_level"])
        sys.exit(1)
    conf["log_level"] = level
    for key, allowed in choices.items():
        if conf[key] not in allowed:
            logger_conf.fatal(
                "Invalid %s %s, expected one of %s", key, conf[key], ', '.join(allowed))
            sys.exit(1)
    return conf
