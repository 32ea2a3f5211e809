from instlib import exceptions as exc
from instlib.validation import (DEFAULT_PORT,
                                DEFAULT_INSTANCE,
                                is_valid_computer_target,
                                is_valid_instance_name,
                                is_localhost,)
from instlib.identifiers import (Identifier,)
from instlib.connstr import (ConnectionString,)
from instlib.objects import (ObjectRecord,
                             kinds,)
from instlib.instance import (InstanceId,
                              origins,
                              protocols,
                              parse,)

__version__ = '0.0.1.dev0'
