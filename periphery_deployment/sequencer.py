import typing
from collections import OrderedDict
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from periphery_deployment.collaborators import ArtifactCompiler, ChainReader, Signer
from periphery_deployment.errors import (
    ConfigurationError,
    DeploymentError,
    InvalidSequenceError,
)
from periphery_deployment.gate import PreconditionGate
from periphery_deployment.linker import BuildConfiguration, LibraryBinder
from periphery_deployment.params import (
    VariableContext,
    constant_names,
    process_raw_value,
    references,
    resolve_param,
    resolve_params,
)
from periphery_deployment.resolver import AddressResolver


class StepKind(Enum):
    CONTRACT = "fresh contract"
    LINKED_CONTRACT = "library-linked contract"
    CALL = "state-mutating call on existing contract"


class StepState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunState(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"
    ABORTED = "aborted"


class LibraryLink(typing.NamedTuple):
    """Which earlier step deployed the library, and where the compiler expects it."""

    step: str
    source_path: str
    name: str


class DeploymentStep(typing.NamedTuple):
    name: str
    kind: StepKind
    args: Tuple[Any, ...] = ()
    contract: Optional[str] = None
    library: Optional[LibraryLink] = None
    target: Any = None
    method: Optional[str] = None
    summary: Optional[Callable[..., str]] = None
    ordinal: int = -1

    def dependencies(self) -> List[str]:
        """Names of the steps this step reads an address from."""
        names = list(references(list(self.args)))
        names.extend(references(self.target))
        if self.library is not None:
            names.append(self.library.step)
        return names

    def constants(self) -> List[str]:
        names = list(constant_names(list(self.args)))
        names.extend(constant_names(self.target))
        return names


def contract(name: str, *args, contract_name: Optional[str] = None) -> DeploymentStep:
    return DeploymentStep(
        name=name,
        kind=StepKind.CONTRACT,
        args=tuple(args),
        contract=contract_name or name,
    )


def linked_contract(
    name: str, *args, library: LibraryLink, contract_name: Optional[str] = None
) -> DeploymentStep:
    return DeploymentStep(
        name=name,
        kind=StepKind.LINKED_CONTRACT,
        args=tuple(args),
        contract=contract_name or name,
        library=library,
    )


def call(
    name: str,
    target: str,
    method: str,
    *args,
    contract_type: str,
    summary: Optional[Callable[..., str]] = None,
) -> DeploymentStep:
    return DeploymentStep(
        name=name,
        kind=StepKind.CALL,
        args=tuple(args),
        contract=contract_type,
        target=target,
        method=method,
        summary=summary,
    )


def sequence(*steps: DeploymentStep) -> Tuple[DeploymentStep, ...]:
    """
    Resolves '$' arguments against the declared step names, assigns ordinals
    and checks that every reference points strictly backwards.
    """
    names = [step.name for step in steps]
    ordered = list()
    seen = set()
    for ordinal, step in enumerate(steps):
        step = step._replace(
            args=tuple(process_raw_value(a, names) for a in step.args),
            target=process_raw_value(step.target, names),
        )
        if step.name in seen:
            raise InvalidSequenceError(f"Step '{step.name}' appears more than once.")
        for dependency in step.dependencies():
            if dependency not in seen:
                raise InvalidSequenceError(
                    f"Step '{step.name}' references '{dependency}', "
                    f"which is not an earlier step in the sequence."
                )
        if step.kind == StepKind.CALL and (step.target is None or not step.method):
            raise InvalidSequenceError(f"Call step '{step.name}' needs a target and a method.")
        if step.kind == StepKind.LINKED_CONTRACT and step.library is None:
            raise InvalidSequenceError(f"Linked step '{step.name}' does not name its library.")
        seen.add(step.name)
        ordered.append(step._replace(ordinal=ordinal))
    return tuple(ordered)


def validate_constants(steps: Iterable[DeploymentStep], constants: Dict[str, Any]) -> None:
    for step in steps:
        for name in step.constants():
            if name not in constants:
                raise ConfigurationError(
                    f"Constant '{name}' used by step '{step.name}' not found in deployment file."
                )


class Sequencer:
    """
    Runs deployment steps strictly in order. Each step starts only after the previous
    one is confirmed; the first failure aborts the run and nothing after it is attempted.
    Contracts deployed before the failure stay on-chain.
    """

    def __init__(
        self,
        steps: typing.Sequence[DeploymentStep],
        compiler: ArtifactCompiler,
        signer: Signer,
        reader: ChainReader,
        constants: Optional[Dict[str, Any]] = None,
        build_config: Optional[BuildConfiguration] = None,
        resolver: Optional[AddressResolver] = None,
    ):
        self.steps = tuple(steps)
        self.compiler = compiler
        self.signer = signer
        self.constants = constants or dict()
        self.build_config = build_config or BuildConfiguration()
        self.resolver = resolver or AddressResolver()
        self.binder = LibraryBinder(self.build_config, compiler)
        self.gate = PreconditionGate(reader)

        self.state = RunState.PENDING
        self.step_states = OrderedDict((step.name, StepState.PENDING) for step in self.steps)
        self.failed_step: Optional[DeploymentStep] = None
        self._artifacts: Optional[Dict[str, Any]] = None
        self._context: Optional[VariableContext] = None

    def run(self) -> AddressResolver:
        if self.state != RunState.PENDING:
            raise DeploymentError(f"Deployment run is already {self.state.value}.")

        self.state = RunState.IN_PROGRESS
        for step in self.steps:
            self.step_states[step.name] = StepState.RUNNING
            try:
                self._execute(step)
            except Exception:
                self.step_states[step.name] = StepState.FAILED
                self.failed_step = step
                self.state = RunState.ABORTED
                print(f"\n(!) Step '{step.name}' failed; aborting deployment.")
                raise
            self.step_states[step.name] = StepState.SUCCEEDED

        self.state = RunState.COMPLETED
        return self.resolver

    @property
    def context(self) -> VariableContext:
        if self._context is None:
            self._context = VariableContext(
                resolver=self.resolver,
                constants=self.constants,
                deployer=self.signer.address,
            )
        return self._context

    def _execute(self, step: DeploymentStep) -> None:
        print(f"\n[{step.ordinal + 1}/{len(self.steps)}] {step.name} ({step.kind.value})")
        if step.kind == StepKind.CONTRACT:
            self._deploy_contract(step)
        elif step.kind == StepKind.LINKED_CONTRACT:
            self._deploy_linked_contract(step)
        elif step.kind == StepKind.CALL:
            self._call(step)
        else:
            raise InvalidSequenceError(f"Unknown step kind {step.kind}")

    def _get_artifact(self, contract_name: str) -> Any:
        if self._artifacts is None:
            self._artifacts = self.compiler.compile(self.build_config)
        try:
            return self._artifacts[contract_name]
        except KeyError:
            raise ConfigurationError(f"No build artifact found for '{contract_name}'.")

    def _deploy_contract(self, step: DeploymentStep) -> None:
        artifact = self._get_artifact(step.contract)
        args = resolve_params(step.args, self.context)
        deployment = self.signer.deploy(artifact, *args)
        address = self.resolver.record(step.name, deployment.address)
        print(f"(i) {step.name} deployed to {address} (tx {deployment.txn_hash})")

    def _deploy_linked_contract(self, step: DeploymentStep) -> None:
        library = step.library
        library_address = self.resolver.resolve(library.step)
        # artifacts built before the library existed cannot be deployed
        self._artifacts = None
        self._artifacts = self.binder.bind_library(library.source_path, library.name, library_address)
        self._deploy_contract(step)

    def _call(self, step: DeploymentStep) -> None:
        target = resolve_param(step.target, self.context)
        self.gate.require_governance_owner(
            contract_address=target,
            expected_caller=self.signer.address,
            contract_type=step.contract,
        )
        args = resolve_params(step.args, self.context)
        txn_hash = self.signer.transact(step.contract, target, step.method, *args)
        if step.summary is not None:
            print(step.summary(*args))
        else:
            print(f"{step.contract}[{target}].{step.method} executed")
        print(txn_hash)
