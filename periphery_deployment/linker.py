from typing import Any, Dict

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from periphery_deployment.collaborators import ArtifactCompiler
from periphery_deployment.errors import ConfigurationError, RecompileError

SourcePath = str
LibraryName = str
Libraries = Dict[SourcePath, Dict[LibraryName, ChecksumAddress]]


class BuildConfiguration:
    """
    In-memory build settings read by the compiler.
    Only the library binder writes to it.
    """

    def __init__(self, libraries: Libraries = None):
        self._libraries: Libraries = dict()
        for source_path, names in (libraries or dict()).items():
            for name, address in names.items():
                self.link(source_path, name, address)

    @property
    def libraries(self) -> Libraries:
        return {source: dict(names) for source, names in self._libraries.items()}

    def link(self, source_path: SourcePath, library_name: LibraryName, address: str) -> None:
        """Binds one library; every other binding is left as it was."""
        if not is_address(address):
            raise ConfigurationError(f"Cannot link {library_name} to invalid address '{address}'.")
        self._libraries.setdefault(source_path, dict())[library_name] = to_checksum_address(address)


class LibraryBinder:
    def __init__(self, build_config: BuildConfiguration, compiler: ArtifactCompiler):
        self.build_config = build_config
        self.compiler = compiler

    def bind_library(
        self, library_source_path: SourcePath, library_name: LibraryName, address: str
    ) -> Dict[str, Any]:
        """
        Links the library into the build configuration and recompiles everything.
        Artifacts compiled before the call must be discarded by the caller.
        """
        self.build_config.link(library_source_path, library_name, address)
        print(f"\nLinking {library_name} ({library_source_path}) at {address}; recompiling...")
        try:
            artifacts = self.compiler.compile(self.build_config)
        except Exception as e:
            raise RecompileError(f"Recompilation after linking {library_name} failed: {e}") from e
        if not artifacts:
            raise RecompileError(f"Recompilation after linking {library_name} produced no artifacts.")
        return artifacts
