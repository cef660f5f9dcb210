"""Configuration package (Facade).

Re-exports the public config types so callers import from one stable path:

	from honeycomb_bootstrap.services.config import NetworkConfig
"""

from honeycomb_bootstrap.services.config.bootstrap_config import SERVICE_NAMES, BootstrapConfig
from honeycomb_bootstrap.services.config.hive_control_config import HiveControlConfig
from honeycomb_bootstrap.services.config.network_config import Network, NetworkConfig

__all__ = ["SERVICE_NAMES", "BootstrapConfig", "HiveControlConfig", "Network", "NetworkConfig"]
