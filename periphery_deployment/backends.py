"""
ape-backed implementations of the compiler, signer and chain reader.
"""

import typing
from collections import OrderedDict
from typing import Any, Dict

from ape import Contract, compilers, project
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.exceptions import ApeException
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address, to_hex
from ethpm_types import MethodABI
from hexbytes import HexBytes
from web3.auto import w3

from periphery_deployment.collaborators import (
    ArtifactCompiler,
    ChainReader,
    Deployment,
    Signer,
)
from periphery_deployment.confirm import _confirm_resolution, _continue
from periphery_deployment.constants import EXTERNAL_ABIS
from periphery_deployment.errors import TransactionFailureError
from periphery_deployment.linker import BuildConfiguration
from periphery_deployment.utils import get_contract_container


def _validate_method_args(
    method_abis: typing.List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _txn_hash(receipt: ReceiptAPI) -> str:
    return to_hex(HexBytes(receipt.txn_hash))


def _check_receipt(receipt: ReceiptAPI, description: str) -> ReceiptAPI:
    if receipt.failed:
        raise TransactionFailureError(f"{description} reverted (tx {_txn_hash(receipt)}).")
    return receipt


def contract_at(contract_type: str, address: ChecksumAddress) -> ContractInstance:
    """Contract instance for an existing address; external contracts use a minimal ABI."""
    abi = EXTERNAL_ABIS.get(contract_type)
    if abi is not None:
        return Contract(address, abi=abi)
    return get_contract_container(contract_type).at(address)


class ApeCompiler(ArtifactCompiler):
    """Compiles the ape project, linking libraries through ape-solidity."""

    def compile(self, build_config: BuildConfiguration) -> Dict[str, ContractContainer]:
        solidity = compilers.solidity
        for source_path, names in build_config.libraries.items():
            source_id = source_path
            for name, address in names.items():
                print(f"Adding library {name} ({source_path}) at {address} to compiler settings")
                library = get_contract_container(name).at(address)
                source_id = library.contract_type.source_id or source_path
                solidity.add_library(library)
            # add_library keeps one library per source; restore the full set
            solidity._libraries[source_id] = dict(names)

        return dict(project.load_contracts(use_cache=False))


class ApeChainReader(ChainReader):
    def call(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> Any:
        instance = contract_at(contract_type, address)
        return getattr(instance, method)(*args)


class Transactor(Signer):
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    @property
    def address(self) -> ChecksumAddress:
        return to_checksum_address(self._account.address)

    def deploy(self, container: ContractContainer, *args) -> Deployment:
        contract_name = container.contract_type.name
        if not self._autosign:
            abi_inputs = container.constructor.abi.inputs if container.constructor.abi else []
            names = [abi_input.name or f"arg{i}" for i, abi_input in enumerate(abi_inputs)]
            _confirm_resolution(OrderedDict(zip(names, args)), contract_name)

        try:
            instance = self._account.deploy(container, *args)
        except ApeException as e:
            raise TransactionFailureError(f"Deployment of {contract_name} failed: {e}") from e

        receipt = _check_receipt(instance.receipt, f"Deployment of {contract_name}")
        return Deployment(address=to_checksum_address(instance.address), txn_hash=_txn_hash(receipt))

    def transact(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> str:
        instance = contract_at(contract_type, address)
        receipt = self.transact_method(getattr(instance, method), *args)
        return _txn_hash(receipt)

    def transact_method(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        try:
            receipt = method(*args, sender=self._account)
        except ApeException as e:
            raise TransactionFailureError(f"{base_message.strip()} failed: {e}") from e
        return _check_receipt(receipt, base_message.strip())
