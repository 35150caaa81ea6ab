"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Sensor Metrics"
APP_VERSION = "0.1.0"

# Default values
DEFAULT_LISTEN = ":9456"
DEFAULT_CONNECT = "192.168.3.41:9456"
DEFAULT_CONNECT_TIMEOUT = 30.0
DEFAULT_RECONNECT_INTERVAL = 5.0
DEFAULT_MAX_LINE_LENGTH = 64 * 1024

# Metric namespace and the model that reports without a device id
METRIC_NAMESPACE = "sensors"
HUMIDITY_MODEL = "DHT22"

# Prefix for environment variable overrides
ENV_PREFIX = "SENSOR_METRICS_"
