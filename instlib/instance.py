""" SQL Server instance identifiers.

Every way of writing down an instance endpoint funnels into InstanceId,
which holds the canonical host, instance, port and protocol and knows how
to render them back out for the various consumers.

Accepted string notations, tried in this order

    .                                   local default instance over pipes
    [sql01\\prod]                        sql identifier quoting
    \\\\sql01\\pipe\\MSSQL$prod\\sql\\query    named pipe path
    Data Source=sql01,1500;...          connection string
    TCP:sql01  NP:sql01                 protocol prefix
    sql01  sql01:1500  sql01,1500       default instance, optional port
    sql01\\prod  sql01:1500\\prod  sql01\\prod,1500
"""

import re
import ipaddress
from collections.abc import Mapping
from instlib import exceptions as exc
from instlib import validation as val
from instlib import objects
from instlib.connstr import ConnectionString
from instlib.identifiers import Identifier
from instlib.utils import logd as log


class protocols:
    Any = 'Any'
    NP = 'NP'
    TCP = 'TCP'


class origins:
    Name = 'Name'
    ConnectionString = 'ConnectionString'
    IPAddress = 'IPAddress'
    PingReply = 'PingReply'
    DnsEntry = 'DnsEntry'
    LiveObject = 'LiveObject'


_protocols = frozenset((protocols.Any, protocols.NP, protocols.TCP))
_origins = frozenset((origins.Name, origins.ConnectionString, origins.IPAddress,
                      origins.PingReply, origins.DnsEntry, origins.LiveObject))

# first match wins, the string is not rescanned for the other one
protocol_prefixes = (('TCP:', protocols.TCP),
                     ('NP:', protocols.NP),)

bracket_regex = re.compile(r'^\[(.*)\]\Z', re.S)
pipe_regex = re.compile(r'^\\\\(?P<host>[^\\]+)\\pipe\\(?:(?P<tag>[^\\]+)\\)?sql\\query\Z',
                        re.IGNORECASE)
pipe_instance_regex = re.compile(r'^MSSQL\$(?P<instance>.+)\Z', re.IGNORECASE | re.S)
port_suffix_regex = re.compile(r'^(?P<rest>.*)[:,](?P<port>[0-9]+)\Z', re.S)


def _quote_sql(name):
    return '[' + name.replace(']', ']]') + ']'


def _check_port(raw, port):
    """ ports are never clamped, out of range is an error """
    try:
        value = int(port)
    except (TypeError, ValueError) as e:
        raise exc.PortOutOfRangeError(raw, token=port, reason='invalid port') from e

    if not 1 <= value <= 65535:
        raise exc.PortOutOfRangeError(raw, token=port)

    return value


def _split_port(segment):
    """ split a trailing :port or ,port off of a segment

        ipv6 literals are full of colons and are never read as
        carrying a port, returns (rest, port_string_or_None) """
    if val.is_ipv6_literal(segment):
        return segment, None

    match = port_suffix_regex.match(segment)
    if match is None:
        return segment, None

    return match.group('rest'), match.group('port')


class InstanceId(Identifier):
    """ A canonical, immutable SQL Server instance endpoint.

        `instance' is None for the default instance, `port' is None
        unless one was given explicitly, `protocol' is protocols.Any
        unless the input asked for one. `origin' records which kind
        of input we were built from and takes no part in equality. """

    def __init__(self, host, instance=None, port=None, protocol=protocols.Any,
                 origin=origins.Name, *, input=None):
        # input is only used to report errors against what the user gave us
        if input is None:
            input = host

        if not isinstance(host, str) or not val.is_valid_computer_target(host):
            raise exc.InvalidHostError(input, token=host)

        if host.startswith('[') and val.is_ipv6_literal(host):
            host = host[1:-1]

        if instance is not None and not isinstance(instance, str):
            raise exc.InvalidInstanceNameError(input, token=instance)

        if not instance or val.is_default_instance_keyword(instance):
            instance = None
        elif not val.is_valid_instance_name(instance):
            raise exc.InvalidInstanceNameError(input, token=instance)

        if port is not None:
            if isinstance(port, bool) or not isinstance(port, int):
                raise exc.PortOutOfRangeError(input, token=port, reason='invalid port')

            port = _check_port(input, port)

        if protocol not in _protocols:
            raise exc.UnrecognizedNotationError(
                input, token=protocol, reason='unknown network protocol')

        if origin not in _origins:
            raise exc.MalformedIdentifierError(
                input, token=origin, reason='unknown origin')

        self._host = host
        self._instance = instance
        self._port = port
        self._protocol = protocol
        self._origin = origin
        self._freeze()

    ## constructors

    @classmethod
    def fromString(cls, name):
        """ parse any of the string notations listed in the module docs """
        fields = cls._fields_from_string(name, name)
        return cls(**fields, input=name)

    @classmethod
    def fromAddress(cls, address):
        """ an ip address object or an ip address literal """
        if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            host = str(address)
        elif isinstance(address, str):
            try:
                host = str(ipaddress.ip_address(address.strip().strip('[]')))
            except ValueError as e:
                raise exc.InvalidHostError(address, reason='not an ip address') from e
        elif address is None:
            raise exc.EmptyInputError(address)
        else:
            raise exc.UnrecognizedNotationError(
                address, reason='failed to interpret input as ip address')

        return cls(host, origin=origins.IPAddress, input=address)

    @classmethod
    def fromPingReply(cls, reply):
        """ anything with an `address' attribute or key, the address of
            the host that answered is the host we target """
        address = getattr(reply, 'address', None)
        if address is None and isinstance(reply, Mapping):
            address = reply.get('address')

        if address is None:
            raise exc.MalformedIdentifierError(
                reply, reason='failed to interpret input as instance, ping reply without address')

        return cls(str(address), origin=origins.PingReply, input=reply)

    @classmethod
    def fromHostEntry(cls, entry):
        """ the result of a name resolution, either the socket.gethostbyaddr
            triple (hostname, aliases, addresses), a record with a
            `hostname' attribute or the bare name, targets the default instance """
        if isinstance(entry, str):
            hostname = entry
        elif isinstance(entry, (tuple, list)) and entry:
            hostname = entry[0]
        else:
            hostname = getattr(entry, 'hostname', None)

        if not hostname:
            raise exc.EmptyInputError(entry, reason='host entry without a host name')

        return cls(hostname, origin=origins.DnsEntry, input=entry)

    @classmethod
    def fromObject(cls, kind, fields=None):
        """ `kind' is the type name of the management object or an
            ObjectRecord, `fields' the properties read off of it """
        if isinstance(kind, objects.ObjectRecord):
            record = kind
        else:
            record = objects.ObjectRecord(kind, fields)

        extracted = objects.fields_from_record(cls, record)
        return cls(**extracted, origin=origins.LiveObject, input=record)

    ## string grammar

    @classmethod
    def _fields_from_string(cls, raw, string):
        if string is None:
            raise exc.EmptyInputError(raw)

        if not isinstance(string, str):
            raise exc.UnrecognizedNotationError(
                raw, reason='failed to interpret input as instance, not a string')

        string = string.strip()
        if not string:
            raise exc.EmptyInputError(raw)

        if string == '.':
            log.debug(f'local named pipe shorthand {raw!r}')
            return dict(host='.', protocol=protocols.NP)

        string = bracket_regex.sub(r'\1', string)

        match = pipe_regex.match(string)
        if match is not None:
            return cls._fields_from_pipe(raw, match)

        fields = cls._fields_from_connection_string(raw, string)
        if fields is not None:
            return fields

        protocol = protocols.Any
        for prefix, _protocol in protocol_prefixes:
            if string[:len(prefix)].upper() == prefix:
                protocol = _protocol
                string = string[len(prefix):]
                break

        if protocol == protocols.NP:
            match = pipe_regex.match(string)
            if match is not None:
                return cls._fields_from_pipe(raw, match)

        segments = string.split('\\')
        if len(segments) == 1:
            fields = cls._fields_default_instance(raw, segments[0])
        elif len(segments) == 2:
            fields = cls._fields_named_instance(raw, *segments)
        else:
            raise exc.UnrecognizedNotationError(raw, token=string)

        fields['protocol'] = protocol
        return fields

    @classmethod
    def _fields_from_pipe(cls, raw, match):
        log.debug(f'named pipe path {raw!r}')
        host, tag = match.group('host', 'tag')
        instance = None
        if tag is not None:
            tag_match = pipe_instance_regex.match(tag)
            if tag_match is not None:
                instance = tag_match.group('instance')

        if not val.is_valid_computer_target(host):
            raise exc.InvalidHostError(
                raw, token=host, reason='failed to interpret named pipe path notation')

        if instance is not None:
            if not val.is_valid_instance_name(instance, allow_default_keywords=True):
                raise exc.InvalidInstanceNameError(
                    raw, token=instance, reason='failed to interpret named pipe path notation')

            if val.is_default_instance_keyword(instance):
                instance = None

        return dict(host=host, instance=instance, protocol=protocols.NP)

    @classmethod
    def _fields_from_connection_string(cls, raw, string):
        """ None means this is not a connection string and the caller
            should keep trying the other notations """
        try:
            connection_string = ConnectionString(string)
        except exc.MalformedKeywordError as e:
            # clearly meant to be a connection string, but a broken one
            raise exc.MalformedKeywordError(raw, token=e.token) from e
        except exc.ConnectionStringSyntaxError as e:
            log.debug(f'not a connection string {raw!r} {e}')
            return None

        data_source = connection_string.data_source
        if not data_source or not data_source.strip():
            log.debug(f'connection string without a data source {raw!r}')
            return None

        log.debug(f'connection string {raw!r} data source {data_source!r}')
        try:
            fields = cls._fields_from_string(raw, data_source)
        except exc.MalformedKeywordError:
            raise
        except exc.MalformedIdentifierError as e:
            # only a bad keyword stops us, everything else gets another try
            log.debug(f'bad data source {data_source!r} in {raw!r} {e}')
            return None

        fields['origin'] = origins.ConnectionString
        return fields

    @classmethod
    def _fields_default_instance(cls, raw, segment):
        host, port = _split_port(segment)
        if port is not None:
            port = _check_port(raw, port)

        if not val.is_valid_computer_target(host):
            raise exc.InvalidHostError(raw, token=host)

        return dict(host=host, port=port)

    @classmethod
    def _fields_named_instance(cls, raw, computer, instance):
        computer, port = _split_port(computer)
        instance, instance_port = _split_port(instance)
        if port is not None and instance_port is not None:
            raise exc.AmbiguousPortError(raw, token=f'{port} {instance_port}')

        if port is None:
            port = instance_port

        if port is not None:
            port = _check_port(raw, port)

        reason = (f'failed to parse instance name. '
                  f'Computer Name: {computer!r}, Instance: {instance!r}')
        if not val.is_valid_computer_target(computer):
            raise exc.InvalidHostError(raw, token=computer, reason=reason)

        if not val.is_valid_instance_name(instance, allow_default_keywords=True):
            raise exc.InvalidInstanceNameError(raw, token=instance, reason=reason)

        if val.is_default_instance_keyword(instance):
            instance = None

        return dict(host=computer, instance=instance, port=port)

    ## fields

    @property
    def host(self):
        """ the computer name without protocol, port or instance """
        return self._host

    computer_name = host

    @property
    def instance(self):
        """ None for the default instance """
        return self._instance

    @property
    def instance_name(self):
        """ the instance name with the default filled in """
        return val.DEFAULT_INSTANCE if self._instance is None else self._instance

    @property
    def port(self):
        """ the explicit port or None """
        return self._port

    @property
    def tcp_port(self):
        """ the port a client will end up using if it is knowable
            without asking the browser service """
        if self._port is None and self._instance is None:
            return val.DEFAULT_PORT

        return self._port

    @property
    def protocol(self):
        return self._protocol

    @property
    def origin(self):
        return self._origin

    @property
    def is_localhost(self):
        return val.is_localhost(self._host)

    @property
    def is_connection_string(self):
        return self._origin == origins.ConnectionString

    ## renderers

    @property
    def full_name(self):
        """ host:port\\instance with the default port left out """
        name = self._host
        if self._port is not None and self._port != val.DEFAULT_PORT:
            if ':' in name:
                name = f'[{name}]'

            name += f':{self._port}'

        if self._instance is not None:
            name += '\\' + self._instance

        return name

    @property
    def full_smo_name(self):
        """ the form client libraries take as a server name

            always PROTOCOL:host\\instance,port, the default port is
            only written when it goes with a named instance """
        name = self._host
        if self._protocol != protocols.Any:
            name = f'{self._protocol}:{name}'

        port = self._port
        if port == val.DEFAULT_PORT and self._instance is None:
            port = None

        if self._instance is not None and port is not None:
            return f'{name}\\{self._instance},{port}'
        elif port is not None:
            return f'{name},{port}'
        elif self._instance is not None:
            return f'{name}\\{self._instance}'
        else:
            return name

    @property
    def sql_computer_name(self):
        return _quote_sql(self._host)

    @property
    def sql_instance_name(self):
        return _quote_sql(self.instance_name)

    @property
    def sql_full_name(self):
        if self._instance is None:
            return _quote_sql(self._host)

        return _quote_sql(self._host + '\\' + self._instance)

    def asStr(self):
        return self.full_name

    def asConnectionString(self, **keywords):
        """ e.g. asConnectionString(initial_catalog='master') """
        return ConnectionString.fromKeywords(
            data_source=self.full_smo_name, **keywords).asStr()

    def asDict(self):
        return {
            'host': self._host,
            'instance': self._instance,
            'port': self._port,
            'protocol': self._protocol,
            'origin': self._origin,
            'full_name': self.full_name,
        }

    ## identity

    def _identity(self):
        port = None if self._port == val.DEFAULT_PORT else self._port
        return (self._host.lower(),
                self.instance_name.lower(),
                port,
                self._protocol,)

    def __str__(self):
        return self.full_smo_name

    def __repr__(self):
        return (f'{self.__class__.__name__}({self._host!r}, '
                f'instance={self._instance!r}, port={self._port!r}, '
                f'protocol={self._protocol!r}, origin={self._origin!r})')

    def __reduce__(self):
        return self.__class__, (self._host, self._instance, self._port,
                                self._protocol, self._origin)


def parse(thing):
    """ turn whatever we were handed into an InstanceId """
    if isinstance(thing, InstanceId):
        return thing
    elif isinstance(thing, str):
        return InstanceId.fromString(thing)
    elif isinstance(thing, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return InstanceId.fromAddress(thing)
    elif isinstance(thing, objects.ObjectRecord):
        return InstanceId.fromObject(thing)
    elif thing is None:
        raise exc.EmptyInputError(thing)
    else:
        msg = f'failed to interpret input as instance, unsupported type {type(thing).__name__}'
        raise exc.UnrecognizedNotationError(thing, reason=msg)
