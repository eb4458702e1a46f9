import re
from typing import Dict, List, Optional
from authproxy.types.models import LabelSelector, LabelSelectorRequirement
from authproxy.utils.errors import LabelSelectorError

_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_PREFIX_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")


class SelectorOperator:
    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


def valid_label_key(key: str) -> bool:
    """Check a label key is a qualified name: an optional DNS prefix and a name."""
    if not key:
        return False
    prefix, _, name = key.rpartition("/")
    if prefix and (len(prefix) > 253 or not _PREFIX_RE.match(prefix)):
        return False
    return len(name) <= 63 and bool(_NAME_RE.match(name))


def valid_label_value(value: str) -> bool:
    if value == "":
        return True
    return len(value) <= 63 and bool(_NAME_RE.match(value))


class Labels:
    """Label requirements rendered in the Kubernetes selector string syntax."""

    _labels: Dict[str, str]
    _requirements: List[str]

    def __init__(self, labels: Dict[str, str] = None) -> None:
        self._labels = dict()
        self._requirements = []
        if labels:
            for key, value in labels.items():
                self.include(key, value)

    def include(self, label: str, value: str) -> "Labels":
        if not valid_label_key(label):
            raise LabelSelectorError(f"invalid label key {label!r}")
        if not valid_label_value(value):
            raise LabelSelectorError(f"invalid value {value!r} for label {label!r}")
        self._labels[label] = value
        return self

    def require(self, requirement: LabelSelectorRequirement) -> "Labels":
        key, op, values = requirement.key, requirement.operator, requirement.values or []
        if not valid_label_key(key):
            raise LabelSelectorError(f"invalid label key {key!r}")
        if op in (SelectorOperator.IN, SelectorOperator.NOT_IN):
            if not values:
                raise LabelSelectorError(
                    f"values must be non-empty for operator {op} on key {key!r}"
                )
            for value in values:
                if not valid_label_value(value):
                    raise LabelSelectorError(f"invalid value {value!r} for label {key!r}")
            keyword = "in" if op == SelectorOperator.IN else "notin"
            self._requirements.append(f"{key} {keyword} ({','.join(sorted(values))})")
        elif op in (SelectorOperator.EXISTS, SelectorOperator.DOES_NOT_EXIST):
            if values:
                raise LabelSelectorError(
                    f"values must be empty for operator {op} on key {key!r}"
                )
            self._requirements.append(key if op == SelectorOperator.EXISTS else f"!{key}")
        else:
            raise LabelSelectorError(f"{op!r} is not a valid label selector operator")
        return self

    def as_dict(self) -> Dict[str, str]:
        return self._labels.copy()

    def as_str(self) -> str:
        """Return labels and requirements as a comma separated selector string."""
        parts = [f"{k}={v}" for k, v in sorted(self._labels.items())]
        return ",".join(parts + self._requirements)

    def is_empty(self) -> bool:
        return not self._labels and not self._requirements

    def __str__(self):
        return f"Labels<{self.as_str()}>"

    @classmethod
    def from_selector(cls, selector: Optional[LabelSelector]) -> "Labels":
        """Convert a label selector into selector requirements.

        Raises:
            LabelSelectorError: the selector holds an invalid key, value or operator.
        """
        labels = cls()
        if selector is None:
            return labels
        for key, value in (selector.match_labels or {}).items():
            labels.include(key, value)
        for requirement in selector.match_expressions or []:
            labels.require(requirement)
        return labels
