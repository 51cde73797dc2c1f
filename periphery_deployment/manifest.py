import json
from pathlib import Path
from typing import Dict, Mapping, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from periphery_deployment.constants import (
    ARTIFACTS_DIR,
    MANIFEST_FILENAME_TEMPLATE,
    MANIFEST_KEYS,
)
from periphery_deployment.errors import ConfigurationError, IncompleteManifestError
from periphery_deployment.resolver import AddressResolver
from periphery_deployment.utils import _load_json

ManifestKey = str

STANDARD_MANIFEST_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


def manifest_filepath(network_name: str, directory: Path = ARTIFACTS_DIR) -> Path:
    return Path(directory) / MANIFEST_FILENAME_TEMPLATE.format(network=network_name)


class ManifestWriter:
    """Persists the addresses of a completed run, one file per network."""

    def __init__(
        self,
        directory: Path = ARTIFACTS_DIR,
        keys: Optional[Mapping[ManifestKey, str]] = None,
    ):
        self.directory = Path(directory)
        self.keys = dict(keys or MANIFEST_KEYS)

    def build(self, resolver: AddressResolver) -> Dict[ManifestKey, ChecksumAddress]:
        missing = [key for key, name in self.keys.items() if name not in resolver]
        if missing:
            raise IncompleteManifestError(missing)
        return {key: to_checksum_address(resolver.resolve(name)) for key, name in self.keys.items()}

    def write(self, network_name: str, resolver: AddressResolver) -> Path:
        """
        Writes the manifest for a network, replacing any previous one wholesale.
        Nothing is written unless every expected key is bound.
        """
        if not network_name:
            raise ConfigurationError("Cannot write a manifest without a network name.")
        data = self.build(resolver)

        filepath = manifest_filepath(network_name, self.directory)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        temp_filepath = filepath.with_suffix(".temp.json")
        try:
            with open(temp_filepath, "w") as file:
                json.dump(data, file, **STANDARD_MANIFEST_JSON_FORMAT)
            temp_filepath.replace(filepath)
        except Exception:
            print(f"Error when writing manifest at {filepath}.")
            temp_filepath.unlink(missing_ok=True)
            raise

        print(f"(i) Manifest written to {filepath}!")
        return filepath


def read_manifest(
    filepath: Path, keys: Optional[Mapping[ManifestKey, str]] = None
) -> Dict[ManifestKey, ChecksumAddress]:
    """Loads a manifest and checks it has exactly the expected keys."""
    expected = set(keys or MANIFEST_KEYS)
    data = _load_json(filepath)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Malformed manifest at {filepath}.")

    missing = expected - set(data)
    if missing:
        raise IncompleteManifestError(sorted(missing))
    unexpected = set(data) - expected
    if unexpected:
        raise ConfigurationError(f"Unexpected manifest entries: {', '.join(sorted(unexpected))}")

    for key, address in data.items():
        if not is_address(address):
            raise ConfigurationError(f"Manifest entry {key} is not a valid address: {address}")
    return data
