"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Penguin Exporter"
APP_VERSION = "0.1.0"

# Metric naming
NAMESPACE = "node"

# Default values
DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_LISTEN_PORT = 9100
DEFAULT_SYSFS = "/sys"
DEFAULT_PROCFS = "/proc"
DEFAULT_CONFIG_PATH = "/etc/penguin-exporter/config.conf"
