""" String predicates for the pieces of an instance endpoint.

Every predicate here is total. Anything that is not a string, or that is
a string we do not like, is simply False. Nothing is resolved over the
network, these only look at the shape of the text.
"""

import re
import socket
import ipaddress
from instlib import utils

DEFAULT_PORT = 1433
DEFAULT_INSTANCE = 'MSSQLSERVER'
default_keywords = frozenset(('default', DEFAULT_INSTANCE.lower()))

local_aliases = frozenset(('.', 'localhost', '(local)'))

hostname_label_regex = re.compile(r'^[A-Za-z0-9_]([A-Za-z0-9_-]{0,61}[A-Za-z0-9_])?\Z')
# letters or underscore first, then letters digits underscore or dollar
instance_name_regex = re.compile(r'^[^\W\d][\w$]{0,15}\Z')
_numeric_label_regex = re.compile(r'^[0-9]+\Z')


def _strip_brackets(string):
    if len(string) > 2 and string[0] == '[' and string[-1] == ']':
        return string[1:-1]

    return string


def _ip_address(string):
    try:
        return ipaddress.ip_address(string)
    except ValueError:
        return None


def is_ipv4_literal(string):
    if not isinstance(string, str):
        return False

    return isinstance(_ip_address(string), ipaddress.IPv4Address)


def is_ipv6_literal(string):
    """ bare or bracketed ipv6, zone ids included """
    if not isinstance(string, str) or ':' not in string:
        return False

    if any(c.isspace() for c in string):
        # ipaddress lets whitespace through in a zone id
        return False

    return isinstance(_ip_address(_strip_brackets(string)), ipaddress.IPv6Address)


def is_valid_hostname(string):
    if not isinstance(string, str) or not string:
        return False

    if string.endswith('.'):
        string = string[:-1]

    if not string or len(string) > 253:
        return False

    labels = string.split('.')
    if not all(hostname_label_regex.match(label) for label in labels):
        return False

    if len(labels) == 4 and all(_numeric_label_regex.match(l) for l in labels):
        # looks like a dotted quad so it had better be one
        return is_ipv4_literal(string)

    return True


def is_valid_computer_target(string):
    """ hostname, fqdn, ipv4, ipv6 (optionally bracketed) or a local alias

        Delimiters are never part of a computer name, if they are
        still present the caller failed to split them off first. """
    if not isinstance(string, str) or not string:
        return False

    if string.lower() in local_aliases:
        return True

    if is_ipv6_literal(string):
        return True

    if any(c in string for c in '\\/:,'):
        return False

    return is_ipv4_literal(string) or is_valid_hostname(string)


def is_default_instance_keyword(string):
    return isinstance(string, str) and string.lower() in default_keywords


def is_valid_instance_name(string, allow_default_keywords=False):
    """ `allow_default_keywords' accepts `default' and `MSSQLSERVER'
        which callers should read as "no named instance" """
    if not isinstance(string, str) or not string:
        return False

    if is_default_instance_keyword(string):
        return bool(allow_default_keywords)

    return instance_name_regex.match(string) is not None


def _local_hostnames():
    try:
        name = socket.gethostname()
    except OSError:
        return frozenset()

    if not name:
        return frozenset()

    name = name.lower()
    return frozenset((name, name.split('.', 1)[0]))


def is_localhost(string):
    if not isinstance(string, str) or not string:
        return False

    lower = string.strip().lower()
    if lower in local_aliases:
        return True

    address = _ip_address(_strip_brackets(lower))
    if address is not None:
        return address.is_loopback

    if lower in _local_hostnames():
        return True

    try:
        return lower in utils.configured_local_names()
    except Exception as e:
        # a broken config does not get to make this raise
        _warn_local_names(e)
        return False


_warned_local_names = set()


def _warn_local_names(e):
    key = (e.__class__, str(e))
    if key in _warned_local_names:
        utils.log.debug(f'local-names still unreadable {e!r}')
        return

    _warned_local_names.add(key)
    utils.log.warning(f'could not read local-names, ignoring it {e!r}')
