class InstlibError(Exception):
    """ base class for instlib errors """


class LocalError(InstlibError):
    """ Something went wrong locally and we can do something about it. """


class ConfigurationError(LocalError):
    """ Something went wrong with local configuration. """


class MalformedIdentifierError(InstlibError, ValueError):
    """ Your input cannot be interpreted as an instance endpoint,
        therefor we will NOT create an identifier for it, it cannot exist.

        `input` is always the raw input exactly as it was passed in,
        `token` is the offending piece of it when we know which one. """

    reason = 'could not interpret input as an instance'

    def __init__(self, input, token=None, reason=None):
        self.input = input
        self.token = token
        if reason is not None:
            self.reason = reason

        msg = f'{self.reason}: {input!r}'
        if token is not None and token != input:
            msg += f' (at {token!r})'

        super().__init__(msg)

    def __reduce__(self):
        return self.__class__, (self.input, self.token, self.reason)


class EmptyInputError(MalformedIdentifierError):
    """ Nothing to work with. """

    reason = 'please provide an instance name'


class InvalidHostError(MalformedIdentifierError):
    """ not a hostname, an ip address or a local alias """

    reason = 'invalid computer name'


class InvalidInstanceNameError(MalformedIdentifierError):
    """ not a legal instance label """

    reason = 'invalid instance name'


class PortOutOfRangeError(MalformedIdentifierError):
    """ ports live in 1-65535 and we do not clamp """

    reason = 'port out of range'


class AmbiguousPortError(MalformedIdentifierError):
    """ Both the computer and the instance segment carry a port.
        We refuse to guess which one is authoritative. """

    reason = 'port specified on both computer and instance'


class UnrecognizedNotationError(MalformedIdentifierError):
    """ matches none of the known notations """

    reason = 'unrecognized instance notation'


class UnrecognizedObjectKindError(MalformedIdentifierError):
    """ the object kind has no extraction recipe """

    reason = 'failed to interpret input as instance, unknown object kind'


class ConnectionStringError(InstlibError, ValueError):
    """ base class for connection string errors """


class ConnectionStringSyntaxError(ConnectionStringError):
    """ The string does not follow the key=value; grammar.
        Usually this just means it was never a connection string. """

    def __init__(self, string, index):
        self.string = string
        self.index = index
        msg = (f'format of the connection string does not conform '
               f'to specification starting at index {index}: {string!r}')
        super().__init__(msg)

    def __reduce__(self):
        return self.__class__, (self.string, self.index)


class MalformedKeywordError(ConnectionStringError, MalformedIdentifierError):
    """ The string is unambiguously a connection string but one of
        its keywords is not supported. This one is never swallowed. """

    reason = 'connection string keyword not supported'


class ImmutableIdentifierError(InstlibError, AttributeError):
    """ identifiers do not change after construction, make a new one """
