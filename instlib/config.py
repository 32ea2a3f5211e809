import orthauth as oa

auth = oa.configure_here('auth-config.py', __name__)
