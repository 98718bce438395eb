from typing import Any, Dict, Protocol
import base64
import binascii
import os
import pickle
import json
import yaml
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import CorruptSnapshotError

Store = Dict[str, Dict[str, str]]


class Serializer(Protocol):
    """Serialize/deserialize a store snapshot to and from bytes.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    """

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Default serializer using pickle (binary).

    Only load snapshots you wrote yourself: unpickling untrusted data can
    execute arbitrary code. Trailing bytes after the pickled object are
    ignored by `pickle.loads`.
    """

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer:
    """Serializer using JSON (text). Snapshots are human readable."""

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, sort_keys=True).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text)."""

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class EncryptedSerializer:
    """Serializer that encrypts snapshots using Fernet (symmetric, authenticated).

    Provide either `key` (a Fernet key) or `password` (a passphrase). In
    password mode every snapshot carries its own random salt and the PBKDF2
    iteration count so the key can be derived again on load. The plaintext
    is produced by `base_serializer`, JSON unless told otherwise.

    The snapshot is a small JSON frame:

        {"v": 1, "mode": "key", "token": "<fernet token>"}
        {"v": 1, "mode": "password", "salt": "<b64>", "iterations": N, "token": "..."}
    """

    FRAME_VERSION = 1
    SALT_BYTES = 16

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_serializer: Serializer | None = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedSerializer requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    def _password_fernet(self, salt: bytes, iterations: int) -> Fernet:
        kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)
        return Fernet(base64.urlsafe_b64encode(kdf.derive(self._password.encode("utf-8"))))

    def dump(self, value: Any) -> bytes:
        """Serialize and encrypt value, returning the framed snapshot."""
        inner = self.base_serializer.dump(value)
        frame: Dict[str, Any] = {"v": self.FRAME_VERSION}
        if self._password is not None:
            salt = os.urandom(self.SALT_BYTES)
            fernet = self._password_fernet(salt, self._iterations)
            frame.update(
                mode="password",
                salt=base64.urlsafe_b64encode(salt).decode("ascii"),
                iterations=self._iterations,
            )
        else:
            fernet = Fernet(self._key)
            frame["mode"] = "key"
        # Fernet tokens are already urlsafe base64.
        frame["token"] = fernet.encrypt(inner).decode("ascii")
        return json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        """Check the frame, pick the key for its mode, decrypt and deserialize.

        A malformed frame raises `ValueError`; a wrong key or tampered token
        raises `cryptography.fernet.InvalidToken`.
        """
        frame = json.loads(data.decode("utf-8"))
        if not isinstance(frame, dict) or frame.get("v") != self.FRAME_VERSION:
            raise ValueError("not an encrypted snapshot frame")
        try:
            mode = frame["mode"]
            token = frame["token"].encode("ascii")
            if mode == "password":
                if self._password is None:
                    raise ValueError("snapshot is password-encrypted but no password was configured")
                salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
                fernet = self._password_fernet(salt, int(frame["iterations"]))
            elif mode == "key":
                if self._key is None:
                    raise ValueError("snapshot is key-encrypted but no key was configured")
                fernet = Fernet(self._key)
            else:
                raise ValueError(f"unknown encryption mode {mode!r}")
        except (KeyError, TypeError, AttributeError, binascii.Error) as exc:
            raise ValueError(f"malformed encrypted snapshot frame: {exc!r}") from exc
        return self.base_serializer.load(fernet.decrypt(token))


_SERIALIZERS = {
    "pickle": PickleSerializer,
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
    "encrypted": EncryptedSerializer,
}


def create_serializer(name: str = "pickle", **options: Any) -> Serializer:
    """Build a serializer by name.

    `options` are passed to the constructor; only `encrypted` takes any
    (`key`, `password`, `iterations`). Options set to None are dropped so a
    `Config` can be splatted in without caring which codec it selects.
    """
    try:
        cls = _SERIALIZERS[name]
    except KeyError:
        raise ValueError(f"unknown serializer {name!r}; expected one of {sorted(_SERIALIZERS)}") from None
    if cls is EncryptedSerializer:
        return cls(**{k: v for k, v in options.items() if v is not None})
    return cls()


def encode_store(store: Store, serializer: Serializer | None = None) -> bytes:
    """Encode the whole namespace mapping into one snapshot."""
    serializer = serializer or PickleSerializer()
    return serializer.dump({ns: dict(bucket) for ns, bucket in store.items()})


def decode_store(data: bytes, serializer: Serializer | None = None) -> Store:
    """Decode a snapshot produced by `encode_store`.

    Raises `CorruptSnapshotError` when the bytes cannot be decoded or do not
    describe a mapping of namespace -> {key: value} strings.
    """
    serializer = serializer or PickleSerializer()
    try:
        value = serializer.load(data)
    except Exception as exc:
        raise CorruptSnapshotError(f"snapshot could not be decoded: {exc}") from exc
    if not isinstance(value, dict):
        raise CorruptSnapshotError(f"snapshot holds {type(value).__name__}, expected a mapping")
    for ns, bucket in value.items():
        if not isinstance(ns, str) or not isinstance(bucket, dict):
            raise CorruptSnapshotError(f"snapshot namespace {ns!r} is malformed")
        for k, v in bucket.items():
            if not isinstance(k, str) or not isinstance(v, str):
                raise CorruptSnapshotError(f"snapshot entry {ns!r}/{k!r} is not a string pair")
    return value
