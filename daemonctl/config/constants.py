"""
Configuration-related constants and resource limits.
"""

# Maximum config file size (10MB)
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

ENV_PREFIX = "DAEMONCTL_"
