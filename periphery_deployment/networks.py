from pathlib import Path

from ape import networks
from ape.api import NetworkAPI

from periphery_deployment.constants import LOCAL_NETWORKS, NETWORK_PARAMS_DIR


def is_local_network() -> bool:
    return networks.provider.network.name in LOCAL_NETWORKS


def network_key(network: NetworkAPI) -> str:
    """Name used to namespace params files and manifests, e.g. 'zksync-sepolia'."""
    return f"{network.ecosystem.name}-{network.name}"


def params_filepath_for_network(network: NetworkAPI) -> Path:
    return NETWORK_PARAMS_DIR / f"{network_key(network)}.yml"
