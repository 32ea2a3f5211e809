test_isolated_config = True

if test_isolated_config:
    import orthauth as oa
    from instlib import config
    from instlib import utils

    # never read the user config of whoever is running the tests, only
    # the defaults and the environment variables apply
    ablob = config.auth.load()
    ublob = {'auth-variables': {}}
    config.auth = oa.AuthConfig.runtimeConfig(ablob, ublob)

    # utils bound auth at import time
    utils.auth = config.auth
