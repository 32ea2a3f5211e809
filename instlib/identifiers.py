"""Identifiers are small values whose fundamental property is that they
come equipped with an equality operation. For instance endpoints that
operation is not string= over whatever the user typed. `sql01,1433',
`Data Source=SQL01' and `[sql01\\MSSQLSERVER]' all name the same thing,
so every notation is first converted to a canonical form and equality
is defined over that form and nothing else.

Identifiers do not change once constructed. If something about the
endpoint is different then it is a different identifier and you make
a new one.
"""

from instlib import exceptions as exc


class Identifier:
    """ Base class for all identifiers """

    _frozen = False

    def __setattr__(self, name, value):
        if self._frozen:
            msg = f'{self.__class__.__name__} is immutable, cannot set {name}'
            raise exc.ImmutableIdentifierError(msg)

        super().__setattr__(name, value)

    def __delattr__(self, name):
        msg = f'{self.__class__.__name__} is immutable, cannot delete {name}'
        raise exc.ImmutableIdentifierError(msg)

    def _freeze(self):
        object.__setattr__(self, '_frozen', True)

    def _identity(self):
        """ the canonical tuple that equality and hashing run over """
        raise NotImplementedError('impl in subclass')

    def __eq__(self, other):
        if self.__class__ != other.__class__:
            return NotImplemented

        return self._identity() == other._identity()

    def __hash__(self):
        return hash((self.__class__, self._identity()))

    def asStr(self):
        """ Return the single string an identifier collapses to """
        raise NotImplementedError('impl in subclass')

    def asDict(self):
        raise NotImplementedError('impl in subclass')


class HelpTestIdentifiers:
    """ generic checks for an identifier constructor

        `parse' is the constructor under test wrapped in staticmethod, `ids' must parse,
        `ids_bad' must raise `error' """

    parse = None
    error = exc.MalformedIdentifierError
    ids = tuple()
    ids_bad = tuple()

    @staticmethod
    def setUpClass():
        if not hasattr(HelpTestIdentifiers, '_pickle'):
            import copy
            HelpTestIdentifiers._copy = copy
            import pickle
            HelpTestIdentifiers._pickle = pickle

    def test_ids(self):
        bads = []
        for i in self.ids:
            try:
                self.parse(i)
            except exc.MalformedIdentifierError as e:
                bads.append((i, e))

        assert not bads, bads

    def test_malformed(self):
        bads = []
        for i in self.ids_bad:
            try:
                d = self.parse(i)
                bads.append((i, d))
            except self.error as e:
                assert e.input == i, (e.input, i)

        assert not bads, bads

    def test_hash_eq_id(self):
        for hrm in self.ids:
            i1 = self.parse(hrm)
            i2 = self.parse(hrm)

            assert len({i1, i2}) == 1
            assert i1 == i2
            assert i1 is not i2

    def test_immutable(self):
        i = self.parse(self.ids[0])
        try:
            i._host = 'lol'
            assert False, 'should have failed'
        except exc.ImmutableIdentifierError:
            pass

    def test_pickle_copy(self):
        bads = []
        for hrm in self.ids:
            d = self.parse(hrm)
            tv = self._pickle.loads(self._pickle.dumps(d))
            if tv != d or tv.origin != d.origin:
                bads.append((tv, d))

            tv = self._copy.deepcopy(d)
            if tv != d:
                bads.append((tv, d))

        assert not bads, bads

    def test_asDict(self):
        for hrm in self.ids:
            d = self.parse(hrm).asDict()
            assert d['host'], d
