import typing
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Collection, Dict, Iterator, List, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from periphery_deployment.constants import ARTIFACTS_DIR, REQUIRED_ADDRESS_CONSTANTS
from periphery_deployment.errors import ConfigurationError
from periphery_deployment.resolver import AddressResolver
from periphery_deployment.utils import _load_yaml


class VariableContext(typing.NamedTuple):
    """Everything a step argument may be resolved against."""

    resolver: AddressResolver
    constants: Dict[str, Any]
    deployer: Optional[ChecksumAddress] = None


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context: VariableContext) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self, context: VariableContext) -> Any:
        if context.deployer is None:
            raise ConfigurationError("Deployer address is not available.")
        return context.deployer

    def __repr__(self):
        return f"${self.DEPLOYER_INDICATOR}"


class Constant(Variable):
    def __init__(self, constant_name: str):
        self.constant_name = constant_name

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, context: VariableContext) -> Any:
        try:
            return context.constants[self.constant_name]
        except KeyError:
            raise ConfigurationError(f"Constant '{self.constant_name}' not found in deployment file.")

    def __repr__(self):
        return f"${self.constant_name}"


class Bytes32Constant(Constant):
    """A text constant encoded as a right-padded ASCII bytes32."""

    BYTES32_PREFIX = "bytes32:"

    def __init__(self, variable: str):
        super().__init__(variable[len(self.BYTES32_PREFIX) :])

    @classmethod
    def is_bytes32(cls, value: str) -> bool:
        return value.startswith(cls.BYTES32_PREFIX)

    def resolve(self, context: VariableContext) -> bytes:
        return ascii_to_bytes32(super().resolve(context))

    def __repr__(self):
        return f"${self.BYTES32_PREFIX}{self.constant_name}"


class ContractAddress(Variable):
    """The address recorded for an earlier step."""

    def __init__(self, contract_name: str):
        self.contract_name = contract_name

    def resolve(self, context: VariableContext) -> ChecksumAddress:
        return context.resolver.resolve(self.contract_name)

    def __repr__(self):
        return f"${self.contract_name}"


def ascii_to_bytes32(text: str) -> bytes:
    try:
        encoded = text.encode("ascii")
    except (AttributeError, UnicodeEncodeError):
        raise ConfigurationError(f"'{text}' is not an ASCII string.")
    if len(encoded) > 32:
        raise ConfigurationError(f"'{text}' does not fit into bytes32.")
    return encoded.ljust(32, b"\x00")


def _variable_from_value(variable: str, step_names: Collection[str] = ()) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Bytes32Constant.is_bytes32(variable):
        return Bytes32Constant(variable)
    elif variable in step_names:
        # a declared step wins over a constant with the same spelling
        return ContractAddress(variable)
    elif Constant.is_constant(variable):
        return Constant(variable)
    else:
        return ContractAddress(variable)


def process_raw_value(value: Any, step_names: Collection[str] = ()) -> Any:
    """
    Turns '$'-prefixed strings (also inside lists) into variables.
    A variable naming one of step_names is always a reference to that step.
    """
    if isinstance(value, list):
        return [process_raw_value(v, step_names) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, step_names)

    return value


def resolve_param(value: Any, context: VariableContext) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


def resolve_params(values: typing.Sequence[Any], context: VariableContext) -> List[Any]:
    return [resolve_param(value, context) for value in values]


def references(value: Any) -> Iterator[str]:
    """Yields the contract names a processed value depends on."""
    if isinstance(value, list):
        for v in value:
            yield from references(v)
    elif isinstance(value, ContractAddress):
        yield value.contract_name


def constant_names(value: Any) -> Iterator[str]:
    """Yields the constant names a processed value depends on."""
    if isinstance(value, list):
        for v in value:
            yield from constant_names(v)
    elif isinstance(value, Constant):
        yield value.constant_name


# Configuration


class DeploymentConfig:
    """
    Network-scoped deployment parameters loaded from a YAML file:

        deployment:
          name: periphery
          network: zksync-sepolia
          chain_id: 300
        constants:
          FACTORY: "0x..."
          WETH9: "0x..."
          NATIVE_CURRENCY_LABEL: ETH
        artifacts:
          dir: ./deployments
    """

    def __init__(
        self,
        name: str,
        network: str,
        chain_id: int,
        constants: Dict[str, Any],
        artifacts_dir: Path = ARTIFACTS_DIR,
        path: Optional[Path] = None,
    ):
        self.name = name
        self.network = network
        self.chain_id = chain_id
        self.constants = constants
        self.artifacts_dir = Path(artifacts_dir)
        self.path = path

    @classmethod
    def from_dict(cls, config: Dict, path: Optional[Path] = None) -> "DeploymentConfig":
        deployment = config.get("deployment")
        if not deployment:
            raise ConfigurationError("deployment is not set in params file.")

        network = deployment.get("network")
        if not network:
            raise ConfigurationError("network is not set in params file.")

        chain_id = deployment.get("chain_id")
        if not chain_id:
            raise ConfigurationError("chain_id is not set in params file.")
        try:
            chain_id = int(chain_id)
        except (TypeError, ValueError):
            raise ConfigurationError(f"chain_id '{chain_id}' is not an integer.")

        constants = _validate_constants(config.get("constants") or dict())

        artifact_config = config.get("artifacts") or dict()
        artifacts_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
        if path is not None and not artifacts_dir.is_absolute():
            artifacts_dir = path.parent / artifacts_dir

        return cls(
            name=deployment.get("name", network),
            network=str(network),
            chain_id=chain_id,
            constants=constants,
            artifacts_dir=artifacts_dir,
            path=path,
        )

    @classmethod
    def from_yaml(cls, filepath: Path) -> "DeploymentConfig":
        try:
            config = _load_yaml(filepath)
        except FileNotFoundError:
            raise ConfigurationError(f"No params file found at {filepath}.")
        if not isinstance(config, dict):
            raise ConfigurationError(f"Malformed params file {filepath}.")
        return cls.from_dict(config, path=filepath)

    @property
    def factory(self) -> ChecksumAddress:
        return self.constants["FACTORY"]

    @property
    def weth9(self) -> ChecksumAddress:
        return self.constants["WETH9"]

    def validate_chain(self, chain_id: int, live: bool = True) -> None:
        """Checks the params file against the chain the provider is connected to."""
        if live and chain_id != self.chain_id:
            raise ConfigurationError(
                f"chain_id in params file ({self.chain_id}) does not match "
                f"chain_id of current network ({chain_id})."
            )


def _validate_constants(constants: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(constants, dict):
        raise ConfigurationError("Malformed constants in params file.")

    validated = dict(constants)
    for name in REQUIRED_ADDRESS_CONSTANTS:
        value = constants.get(name)
        if not value:
            raise ConfigurationError(f"Required address constant '{name}' is not set.")
        if not isinstance(value, str) or not is_address(value):
            raise ConfigurationError(f"Constant '{name}' is not a valid address: {value}")
        validated[name] = to_checksum_address(value)

    return validated
