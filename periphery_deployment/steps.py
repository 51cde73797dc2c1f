from periphery_deployment.constants import (
    FACTORY_CONTRACT_TYPE,
    NFT_DESCRIPTOR_LIBRARY,
    NFT_DESCRIPTOR_SOURCE,
    ONE_BP_FEE,
    ONE_BP_TICK_SPACING,
)
from periphery_deployment.sequencer import LibraryLink, call, contract, linked_contract, sequence


def _fee_tier_summary(fee: int, tick_spacing: int) -> str:
    return (
        f"{FACTORY_CONTRACT_TYPE} added a new fee tier {fee / 100:g} bps "
        f"with tick spacing {tick_spacing}"
    )


ENABLE_ONE_BP_FEE_TIER = call(
    "EnableOneBpFeeTier",
    "$FACTORY",
    "enableFeeAmount",
    ONE_BP_FEE,
    ONE_BP_TICK_SPACING,
    contract_type=FACTORY_CONTRACT_TYPE,
    summary=_fee_tier_summary,
)

FEE_TIER_STEPS = sequence(ENABLE_ONE_BP_FEE_TIER)

PERIPHERY_STEPS = sequence(
    ENABLE_ONE_BP_FEE_TIER,
    contract("UniswapInterfaceMulticall"),
    contract("TickLens"),
    contract(NFT_DESCRIPTOR_LIBRARY),
    linked_contract(
        "NonfungibleTokenPositionDescriptor",
        "$WETH9",
        "$bytes32:NATIVE_CURRENCY_LABEL",
        library=LibraryLink(
            step=NFT_DESCRIPTOR_LIBRARY,
            source_path=NFT_DESCRIPTOR_SOURCE,
            name=NFT_DESCRIPTOR_LIBRARY,
        ),
    ),
    contract(
        "NonfungiblePositionManager",
        "$FACTORY",
        "$WETH9",
        "$NonfungibleTokenPositionDescriptor",
    ),
    contract("V3Migrator", "$FACTORY", "$WETH9", "$NonfungiblePositionManager"),
    # V3 staker is not deployed
    contract("QuoterV2", "$FACTORY", "$WETH9"),
    contract("SwapRouter", "$FACTORY", "$WETH9"),
)
