from collections import OrderedDict
from pathlib import Path

import periphery_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(periphery_deployment.__file__).parent
NETWORK_PARAMS_DIR = DEPLOYMENT_DIR / "network_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR.parent / "deployments"

MANIFEST_FILENAME_TEMPLATE = "deployment.{network}.json"

#
# Networks
#

LOCAL_NETWORKS = ["local"]

#
# Governance
#

FACTORY_CONTRACT_TYPE = "UniswapV3Factory"
REQUIRED_ADDRESS_CONSTANTS = ("FACTORY", "WETH9")

# 1 bp fee tier, see UniswapV3Factory.enableFeeAmount
ONE_BP_FEE = 100
ONE_BP_TICK_SPACING = 1

# Only the parts of the factory ABI used by the fee tier step.
UNISWAP_V3_FACTORY_ABI = [
    {
        "type": "function",
        "name": "owner",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address", "internalType": "address"}],
    },
    {
        "type": "function",
        "name": "enableFeeAmount",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "fee", "type": "uint24", "internalType": "uint24"},
            {"name": "tickSpacing", "type": "int24", "internalType": "int24"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "feeAmountTickSpacing",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint24", "internalType": "uint24"}],
        "outputs": [{"name": "", "type": "int24", "internalType": "int24"}],
    },
]

EXTERNAL_ABIS = {
    FACTORY_CONTRACT_TYPE: UNISWAP_V3_FACTORY_ABI,
}

#
# Libraries
#

NFT_DESCRIPTOR_LIBRARY = "NFTDescriptor"
NFT_DESCRIPTOR_SOURCE = "contracts/libraries/NFTDescriptor.sol"

#
# Manifest
#

# manifest key -> logical contract name
MANIFEST_KEYS = OrderedDict(
    [
        ("multicall2Address", "UniswapInterfaceMulticall"),
        ("tickLensAddress", "TickLens"),
        ("nftDescriptorLibraryAddress", NFT_DESCRIPTOR_LIBRARY),
        ("nonfungibleTokenPositionDescriptorAddress", "NonfungibleTokenPositionDescriptor"),
        ("nonfungibleTokenPositionManagerAddress", "NonfungiblePositionManager"),
        ("v3MigratorAddress", "V3Migrator"),
        ("quoterV2Address", "QuoterV2"),
        ("swapRouter02Address", "SwapRouter"),
    ]
)
