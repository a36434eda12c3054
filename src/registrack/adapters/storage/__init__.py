"""Storage adapters implementing the KeyValueStore and SecretStore protocols."""

from registrack.adapters.storage.encrypted import FernetSecretStore
from registrack.adapters.storage.file import JsonFileKeyValueStore
from registrack.adapters.storage.memory import InMemoryKeyValueStore, InMemorySecretStore
from registrack.adapters.storage.recovery import RecoveryStore

__all__ = [
    "FernetSecretStore",
    "InMemoryKeyValueStore",
    "InMemorySecretStore",
    "JsonFileKeyValueStore",
    "RecoveryStore",
]
