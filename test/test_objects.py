import unittest
import pytest
from instlib import exceptions as exc
from instlib.identifiers import HelpTestIdentifiers
from instlib.instance import InstanceId, origins, protocols
from instlib.objects import ObjectRecord, kinds, normalize_kind


class TestFromObject(HelpTestIdentifiers, unittest.TestCase):
    parse = staticmethod(InstanceId.fromObject)
    ids = [
        ObjectRecord(kinds.LinkedServer, {'Name': 'sql02'}),
        ObjectRecord('Microsoft.SqlServer.Management.Smo.Server',
                     {'NetName': 'SQL01',
                      'InstanceName': 'prod',
                      'ConnectionString': 'server=sql01\\prod,1500;Integrated Security=true'}),
        ObjectRecord('Deserialized.Microsoft.SqlServer.Management.Smo.Server',
                     {'DomainInstanceName': 'sql01.contoso.com\\prod',
                      'InstanceName': ''}),
        ObjectRecord(kinds.AdComputer, {'Name': 'SQL03', 'DNSHostName': 'sql03.contoso.com'}),
        ObjectRecord(kinds.RegisteredServer, {'ServerName': 'TCP:sql04\\prod,1433'}),
    ]
    ids_bad = [
        ObjectRecord('System.String', {'Name': 'sql01'}),
        ObjectRecord(None, {}),
        ObjectRecord(kinds.LinkedServer, {}),
        ObjectRecord(kinds.LinkedServer, None),
        ObjectRecord(kinds.LinkedServer, ['sql01']),
        ObjectRecord(kinds.LinkedServer, {'Name': 'sql 01'}),
        ObjectRecord(kinds.LinkedServer, {'Name': 'sql02\n'}),
        ObjectRecord(kinds.AdComputer, {'Name': 'SQL03', 'DNSHostName': 'sql03.contoso.com\n'}),
        ObjectRecord(kinds.Server, {'NetName': 'sql01', 'InstanceName': 'prod\n'}),
        ObjectRecord(kinds.Server, {'InstanceName': 'prod'}),
        ObjectRecord(kinds.Server, {'NetName': 'sql01', 'InstanceName': '1433'}),
        ObjectRecord(kinds.Server, {'NetName': 'sql01',
                                    'ConnectionString': 'Data Source=sql01,99999'}),
        ObjectRecord(kinds.Server, {'NetName': 'sql01',
                                    'ConnectionString': 'Data Source=sql01;Flavor=vanilla'}),
        ObjectRecord(kinds.RegisteredServer, {'ServerName': 'sql01\\1433'}),
    ]


class TestRecipes(unittest.TestCase):

    def test_kind_normalization(self):
        assert normalize_kind('Deserialized.Microsoft.SqlServer.Management.Smo.Server') == kinds.Server
        assert normalize_kind(' MICROSOFT.SQLSERVER.MANAGEMENT.SMO.LINKEDSERVER ') == kinds.LinkedServer
        assert normalize_kind(None) is None

    def test_server(self):
        i = InstanceId.fromObject(kinds.Server,
                                  {'NetName': 'SQL01',
                                   'DomainInstanceName': 'ignored\\other',
                                   'InstanceName': 'prod',
                                   'ConnectionString': 'Data Source = sql01\\prod, 1500;Database=master'})
        assert i.host == 'SQL01'
        assert i.instance == 'prod'
        assert i.port == 1500
        assert i.protocol == protocols.Any
        assert i.origin == origins.LiveObject

    def test_server_domain_instance_name(self):
        i = InstanceId.fromObject(kinds.Server,
                                  {'NetName': '',
                                   'DomainInstanceName': 'sql01.contoso.com\\prod',
                                   'InstanceName': 'prod'})
        assert i.host == 'sql01.contoso.com'
        assert i.instance == 'prod'
        assert i.port is None

    def test_server_default_port_dropped(self):
        i = InstanceId.fromObject(kinds.Server,
                                  {'NetName': 'sql01',
                                   'InstanceName': 'MSSQLSERVER',
                                   'ConnectionString': 'Data Source=sql01,1433'})
        assert i.instance is None
        assert i.port is None

    def test_server_no_port_in_connection_string(self):
        i = InstanceId.fromObject(kinds.Server,
                                  {'NetName': 'sql01',
                                   'ConnectionString': 'Data Source=sql01;Database=master'})
        assert i.port is None

    def test_ad_computer(self):
        i = InstanceId.fromObject(kinds.AdComputer, {'Name': 'SQL03', 'DNSHostName': ''})
        assert i.host == 'SQL03'

        i = InstanceId.fromObject(kinds.AdComputer, {'Name': 'SQL03', 'DNSHostName': 'sql03.contoso.com'})
        assert i.host == 'sql03.contoso.com'

    def test_registered_server(self):
        i = InstanceId.fromObject(kinds.RegisteredServer, {'ServerName': 'TCP:sql04\\prod,1433'})
        assert i.host == 'sql04'
        assert i.instance == 'prod'
        assert i.port is None
        assert i.protocol == protocols.TCP

        i = InstanceId.fromObject(kinds.RegisteredServer, {'ServerName': 'sql04\\MSSQLSERVER,1500'})
        assert i.instance is None
        assert i.port == 1500

    def test_unknown_kind(self):
        record = ObjectRecord('Microsoft.SqlServer.Management.Smo.Database', {'Name': 'master'})
        with pytest.raises(exc.UnrecognizedObjectKindError) as caught:
            InstanceId.fromObject(record)

        assert caught.value.input == record
        assert caught.value.token == record.kind

    def test_nested_errors_keep_their_kind(self):
        with pytest.raises(exc.InvalidInstanceNameError) as caught:
            InstanceId.fromObject(kinds.RegisteredServer, {'ServerName': 'sql01\\1433'})

        assert caught.value.token == 'sql01\\1433'
