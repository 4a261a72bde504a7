import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Pattern, Protocol

from .errors import ValidationError

logger = logging.getLogger(__name__)

KEY_PATTERN: Pattern[str] = re.compile(r'[A-Za-z0-9_.-]+')


class PolicyStore(Protocol):
    """Flat key -> JSON blob store used by the feature-flag configurator"""

    def read_policy(self, key: str) -> Optional[str]:
        ...

    def write_policy(self, key: str, blob: str) -> None:
        ...


@dataclass(frozen=True)
class FeaturePolicy:
    allow_edit: bool = True
    default: int = 0
    is_enabled: bool = False

    def __post_init__(self) -> None:
        if self.default not in (0, 1) or isinstance(self.default, bool):
            raise ValidationError(f"Feature default must be 0 or 1, got {self.default!r}")

    @classmethod
    def from_dict(cls, data: Any) -> 'FeaturePolicy':
        if not isinstance(data, dict):
            raise ValidationError(f"Feature policy must be an object, got {type(data).__name__}")

        allow_edit = data.get('allowEdit', True)
        is_enabled = data.get('isEnabled', False)
        if not isinstance(allow_edit, bool) or not isinstance(is_enabled, bool):
            raise ValidationError("allowEdit and isEnabled must be booleans")
        return cls(allow_edit=allow_edit, default=data.get('default', 0), is_enabled=is_enabled)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'allowEdit': self.allow_edit,
            'default': self.default,
            'isEnabled': self.is_enabled,
        }


@dataclass(frozen=True)
class PolicyDocument:
    """Per-feature policies plus the global managed flag"""

    managed: bool = False
    features: Dict[str, FeaturePolicy] = field(default_factory=dict)

    @classmethod
    def from_json(cls, blob: str) -> 'PolicyDocument':
        """
        Parse a stored policy blob.

        Raises:
            ValidationError: malformed JSON or unexpected structure
        """
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Malformed policy JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Policy document must be a JSON object")

        managed = data.get('managed', False)
        if not isinstance(managed, bool):
            raise ValidationError("'managed' must be a boolean")

        features = data.get('features', {})
        if not isinstance(features, dict):
            raise ValidationError("'features' must be an object")

        return cls(
            managed=managed,
            features={name: FeaturePolicy.from_dict(value) for name, value in features.items()}
        )

    def to_json(self) -> str:
        return json.dumps({
            'managed': self.managed,
            'features': {name: policy.to_dict() for name, policy in sorted(self.features.items())},
        })

    def with_feature(self, name: str, policy: FeaturePolicy) -> 'PolicyDocument':
        features = dict(self.features)
        features[name] = policy
        return PolicyDocument(managed=self.managed, features=features)


class JsonPolicyStore:
    """Store each policy blob as <key>.json under a directory"""

    def __init__(self, directory: str = 'policies') -> None:
        self.directory: Path = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        # Validate key (prevent path traversal)
        if not KEY_PATTERN.fullmatch(key) or key in ('.', '..'):
            raise ValidationError(f"Invalid policy key: {key!r}")
        return self.directory / f"{key}.json"

    def read_policy(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def write_policy(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix('.json.tmp')
        tmp_path.write_text(blob, encoding='utf-8')
        tmp_path.replace(path)
        logger.info(f"Wrote policy {key} ({len(blob)} bytes)")

    def load(self, key: str) -> Optional[PolicyDocument]:
        blob = self.read_policy(key)
        if blob is None:
            return None
        return PolicyDocument.from_json(blob)

    def save(self, key: str, document: PolicyDocument) -> None:
        self.write_policy(key, document.to_json())
