""" Recipes for the management objects a collaborator may hand us.

We never talk to a live session ourselves. Whoever holds the object reads
the handful of properties listed below into a plain mapping and passes
that along with the object's type name, e.g.

    ObjectRecord('Microsoft.SqlServer.Management.Smo.LinkedServer',
                 {'Name': 'sql02'})

Each kind has one fixed recipe. A kind that is not listed here is an
error, there is no generic fallback.
"""

import re
from collections import namedtuple
from collections.abc import Mapping
from instlib import exceptions as exc
from instlib import validation as val
from instlib.connstr import ConnectionString

ObjectRecord = namedtuple('ObjectRecord', ('kind', 'fields'))


class kinds:
    Server = 'microsoft.sqlserver.management.smo.server'
    LinkedServer = 'microsoft.sqlserver.management.smo.linkedserver'
    AdComputer = 'microsoft.activedirectory.management.adcomputer'
    RegisteredServer = 'microsoft.sqlserver.management.registeredservers.registeredserver'


_deserialized_prefix = 'deserialized.'
_trailing_port_regex = re.compile(r',(\d+)\Z')


def normalize_kind(kind):
    """ type names compare case insensitively and objects that went
        through remoting keep their kind under a Deserialized. prefix """
    if not isinstance(kind, str):
        return None

    kind = kind.strip().lower()
    if kind.startswith(_deserialized_prefix):
        kind = kind[len(_deserialized_prefix):]

    return kind


def _field(record, name, required=True):
    value = (record.fields or {}).get(name)
    if value is not None and not isinstance(value, str):
        value = str(value)

    if required and not value:
        raise exc.MalformedIdentifierError(
            record, token=name,
            reason='failed to interpret input as instance, missing field')

    return value


def _reparse(id_class, record, value):
    try:
        return id_class.fromString(value)
    except exc.MalformedIdentifierError as e:
        raise e.__class__(record, token=value) from e


def _port_from_connection_string(record, string):
    try:
        data_source = ConnectionString(string).data_source
    except exc.ConnectionStringError as e:
        raise exc.MalformedIdentifierError(
            record, token=string,
            reason='failed to parse port number on connection string') from e

    if not data_source:
        return None

    data_source = data_source.replace(' ', '')
    match = _trailing_port_regex.search(data_source)
    if match is None or data_source.count(',') != 1:
        return None

    port = int(match.group(1))
    if not 1 <= port <= 65535:
        raise exc.PortOutOfRangeError(record, token=match.group(1))

    return None if port == val.DEFAULT_PORT else port


def _server(id_class, record):
    net_name = _field(record, 'NetName', required=False)
    if net_name:
        host = net_name
    else:
        host = _reparse(id_class, record, _field(record, 'DomainInstanceName')).host

    instance = _field(record, 'InstanceName', required=False) or None
    if val.is_default_instance_keyword(instance):
        instance = None

    port = None
    connection_string = _field(record, 'ConnectionString', required=False)
    if connection_string:
        port = _port_from_connection_string(record, connection_string)

    return dict(host=host, instance=instance, port=port)


def _linked_server(id_class, record):
    return dict(host=_field(record, 'Name'))


def _ad_computer(id_class, record):
    # dns host name is preferred whenever there is one
    host = _field(record, 'DNSHostName', required=False) or _field(record, 'Name')
    return dict(host=host)


def _registered_server(id_class, record):
    parsed = _reparse(id_class, record, _field(record, 'ServerName'))
    port = parsed.port
    if port == val.DEFAULT_PORT:
        port = None

    return dict(host=parsed.host,
                instance=parsed.instance,
                port=port,
                protocol=parsed.protocol)


recipes = {
    kinds.Server: _server,
    kinds.LinkedServer: _linked_server,
    kinds.AdComputer: _ad_computer,
    kinds.RegisteredServer: _registered_server,
}


def fields_from_record(id_class, record):
    """ apply the recipe for the record's kind, returns constructor kwargs """
    try:
        recipe = recipes[normalize_kind(record.kind)]
    except KeyError as e:
        raise exc.UnrecognizedObjectKindError(record, token=record.kind) from e

    if record.fields is not None and not isinstance(record.fields, Mapping):
        raise exc.MalformedIdentifierError(
            record, token=record.fields,
            reason='failed to interpret input as instance, fields must be a mapping')

    return recipe(id_class, record)
