import re
import logging
from instlib import exceptions as exc
from instlib.config import auth


## logging

def makeSimpleLogger(name, level=logging.INFO):
    logger = logging.getLogger(name)
    logger.setLevel(level)
    ch = logging.StreamHandler()
    fmt = ('[%(asctime)s] - %(levelname)8s - '
           '%(name)14s - '
           '%(filename)16s:%(lineno)-4d - '
           '%(message)s')
    formatter = logging.Formatter(fmt)
    ch.setFormatter(formatter)
    logger.addHandler(ch)
    return logger


def configured_log_level():
    level = auth.get('log-level')
    if level is None:
        return logging.INFO

    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        msg = f'unknown log-level {level!r}'
        raise exc.ConfigurationError(msg)

    return value


log = makeSimpleLogger('instlib', level=configured_log_level())
logd = log.getChild('parse')


## config

def configured_local_names():
    """ additional names that should be treated as the local machine
        accepts a list from the user config or a comma/whitespace
        separated string from the environment """
    names = auth.get('local-names')
    if not names:
        return frozenset()

    if isinstance(names, str):
        names = re.split(r'[\s,]+', names)

    return frozenset(n.strip().lower() for n in names if n and n.strip())
