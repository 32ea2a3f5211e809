{'config-search-paths': ['{:user-config-path}/instlib/config.yaml',],
 'auth-variables': {
     'log-level': {
         'default': 'INFO',
         'environment-variables': 'INSTLIB_LOG_LEVEL'},
     'local-names': {
         'default': None,
         'environment-variables': 'INSTLIB_LOCAL_NAMES'},}}
