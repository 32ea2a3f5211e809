""" ADO.NET style connection strings, only as much as we need to pull
the data source out of one and to write one back out.

    Data Source=sql01\\prod,1500;Initial Catalog=master;User ID='sa'

Keywords are case insensitive and normalized through the SqlClient
synonym table so that `Server=x' and `Data Source=x' are the same thing.
"""

from instlib import exceptions as exc

# canonical keyword -> synonyms, the canonical spelling is what asStr writes
_keyword_synonyms = {
    'Application Intent': ('ApplicationIntent',),
    'Application Name': ('App',),
    'Asynchronous Processing': ('Async',),
    'AttachDbFilename': ('Extended Properties', 'Initial File Name'),
    'Authentication': (),
    'Column Encryption Setting': (),
    'Command Timeout': (),
    'Connect Retry Count': ('ConnectRetryCount',),
    'Connect Retry Interval': ('ConnectRetryInterval',),
    'Connect Timeout': ('Connection Timeout', 'Timeout'),
    'Context Connection': (),
    'Current Language': ('Language',),
    'Data Source': ('Server', 'Address', 'Addr', 'Network Address'),
    'Encrypt': (),
    'Enlist': (),
    'Failover Partner': (),
    'Host Name In Certificate': ('HostNameInCertificate',),
    'Initial Catalog': ('Database',),
    'Integrated Security': ('Trusted_Connection',),
    'IP Address Preference': ('IPAddressPreference',),
    'Load Balance Timeout': ('Connection Lifetime',),
    'Max Pool Size': (),
    'Min Pool Size': (),
    'MultipleActiveResultSets': ('Multiple Active Result Sets',),
    'MultiSubnetFailover': ('Multi Subnet Failover',),
    'Network Library': ('Net', 'Network'),
    'Packet Size': (),
    'Password': ('PWD',),
    'Persist Security Info': ('PersistSecurityInfo',),
    'Pool Blocking Period': ('PoolBlockingPeriod',),
    'Pooling': (),
    'Replication': (),
    'Transaction Binding': (),
    'TransparentNetworkIPResolution': ('Transparent Network IP Resolution',),
    'Trust Server Certificate': ('TrustServerCertificate',),
    'Type System Version': (),
    'User ID': ('UID', 'User'),
    'User Instance': (),
    'Workstation ID': ('WSID',),
}

keywords = {}
for _canonical, _synonyms in _keyword_synonyms.items():
    for _name in (_canonical,) + _synonyms:
        keywords[_name.lower()] = _canonical

del _canonical, _synonyms, _name

DATA_SOURCE = 'Data Source'


def normalize_keyword(keyword, string=None):
    """ return the canonical spelling or raise MalformedKeywordError """
    key = ' '.join(keyword.split()).lower()
    try:
        return keywords[key]
    except KeyError as e:
        raise exc.MalformedKeywordError(
            string if string is not None else keyword, token=keyword) from e


def _skip_whitespace(string, i):
    while i < len(string) and string[i].isspace():
        i += 1

    return i


def _read_key(string, i):
    """ keys run up to the first lone `=', `==' is a literal `=' """
    chars = []
    while i < len(string):
        c = string[i]
        if c == '=':
            if string[i + 1:i + 2] == '=':
                chars.append('=')
                i += 2
                continue

            return ''.join(chars), i + 1

        if c == ';':
            break

        chars.append(c)
        i += 1

    raise exc.ConnectionStringSyntaxError(string, i)


def _read_value(string, i):
    i = _skip_whitespace(string, i)
    if i < len(string) and string[i] in '\'"':
        quote = string[i]
        chars = []
        i += 1
        while True:
            if i >= len(string):
                # unterminated quote
                raise exc.ConnectionStringSyntaxError(string, i)

            c = string[i]
            if c == quote:
                if string[i + 1:i + 2] == quote:
                    chars.append(quote)
                    i += 2
                    continue

                i += 1
                break

            chars.append(c)
            i += 1

        i = _skip_whitespace(string, i)
        if i < len(string) and string[i] != ';':
            raise exc.ConnectionStringSyntaxError(string, i)

        return ''.join(chars), i + 1

    end = string.find(';', i)
    if end == -1:
        end = len(string)

    return string[i:end].strip(), end + 1


def parse_pairs(string):
    """ yield (keyword, value) in order of appearance, keywords as written """
    i = 0
    while True:
        i = _skip_whitespace(string, i)
        if i >= len(string):
            return

        if string[i] == ';':
            i += 1
            continue

        start = i
        key, i = _read_key(string, i)
        key = key.strip()
        if not key:
            raise exc.ConnectionStringSyntaxError(string, start)

        value, i = _read_value(string, i)
        yield key, value


def _quote(value):
    if value == '' or value != value.strip() or any(c in value for c in ';\'"'):
        if '"' in value and "'" not in value:
            return "'" + value + "'"

        return '"' + value.replace('"', '""') + '"'

    return value


class ConnectionString:
    """ Read only view of a parsed connection string.

        Lookup works with any synonym, `cs['server']' and
        `cs['Data Source']' are the same entry. Later duplicates win. """

    def __init__(self, string):
        if not isinstance(string, str):
            raise TypeError(f'connection string must be a str not {type(string)}')

        self._string = string
        self._values = {}
        for key, value in parse_pairs(string):
            self._values[normalize_keyword(key, string)] = value

    @classmethod
    def fromKeywords(cls, **keywords):
        """ python friendly constructor, underscores stand in for spaces
            e.g. ConnectionString.fromKeywords(data_source='sql01') """
        self = cls.__new__(cls)
        self._string = None
        self._values = {}
        for key, value in keywords.items():
            try:
                canonical = normalize_keyword(key.replace('_', ' '))
            except exc.MalformedKeywordError:
                # Trusted_Connection really does have an underscore
                canonical = normalize_keyword(key)

            self._values[canonical] = str(value)

        return self

    @property
    def data_source(self):
        return self._values.get(DATA_SOURCE)

    def __getitem__(self, keyword):
        return self._values[normalize_keyword(keyword)]

    def get(self, keyword, default=None):
        try:
            return self[keyword]
        except KeyError:
            return default

    def __contains__(self, keyword):
        try:
            return normalize_keyword(keyword) in self._values
        except exc.MalformedKeywordError:
            return False

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def items(self):
        return self._values.items()

    def asStr(self):
        return ';'.join(f'{k}={_quote(v)}' for k, v in self._values.items())

    def __str__(self):
        return self.asStr()

    def __repr__(self):
        # never show secrets in a repr
        shown = {k: ('***' if k == 'Password' else v) for k, v in self._values.items()}
        return f'{self.__class__.__name__}({shown!r})'

    def __eq__(self, other):
        return self.__class__ == other.__class__ and self._values == other._values

    def __hash__(self):
        return hash((self.__class__, tuple(sorted(self._values.items()))))
