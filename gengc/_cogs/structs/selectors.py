"""
Label selectors: parsing, validation, rendering, and local matching.

The grammar is the one of Kubernetes' ``labelSelector`` query parameter:
a comma-separated conjunction of requirements, each being one of::

    key=value   key==value   key!=value
    key<123     key>123
    key in (value1,value2)   key notin (value1,value2)
    key         !key

The selectors are validated locally before they are sent to the API,
so that a malformed selector fails early, before any API calls are made.
The local matching is used where the objects are not stored in the cluster
(e.g. in the in-memory fake cluster for testing).
"""
import dataclasses
import enum
import re
from collections.abc import Iterator, Mapping

# As in K8s' "k8s.io/apimachinery/pkg/util/validation".
_NAME_PATTERN = re.compile(r'^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$')
_PREFIX_PATTERN = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$')
_NAME_MAX_LENGTH = 63
_PREFIX_MAX_LENGTH = 253

_KEY = r'[^\s=!<>(),]+'
_SET_REQUIREMENT = re.compile(rf'^(?P<key>{_KEY})\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$')
_VALUE_REQUIREMENT = re.compile(rf'^(?P<key>{_KEY})\s*(?P<op>==|!=|=|<|>)\s*(?P<value>[^\s=!<>(),]*)$')
_ABSENCE_REQUIREMENT = re.compile(rf'^!\s*(?P<key>{_KEY})$')
_PRESENCE_REQUIREMENT = re.compile(rf'^(?P<key>{_KEY})$')


class SelectorError(ValueError):
    """ Raised when a label selector cannot be parsed or is invalid. """


class Operator(str, enum.Enum):
    EQUALS = '='
    NOT_EQUALS = '!='
    IN = 'in'
    NOT_IN = 'notin'
    EXISTS = 'exists'
    DOES_NOT_EXIST = '!'
    LESS_THAN = '<'
    GREATER_THAN = '>'


@dataclasses.dataclass(frozen=True)
class Requirement:
    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def __str__(self) -> str:
        match self.operator:
            case Operator.EXISTS:
                return self.key
            case Operator.DOES_NOT_EXIST:
                return f'!{self.key}'
            case Operator.IN | Operator.NOT_IN:
                return f'{self.key} {self.operator.value} ({",".join(self.values)})'
            case _:
                return f'{self.key}{self.operator.value}{self.values[0]}'

    def matches(self, labels: Mapping[str, str]) -> bool:
        match self.operator:
            case Operator.EQUALS | Operator.IN:
                return self.key in labels and labels[self.key] in self.values
            case Operator.NOT_EQUALS | Operator.NOT_IN:
                return self.key not in labels or labels[self.key] not in self.values
            case Operator.EXISTS:
                return self.key in labels
            case Operator.DOES_NOT_EXIST:
                return self.key not in labels
            case Operator.LESS_THAN | Operator.GREATER_THAN:
                # Only the labels with integer values can be compared; others never match.
                if self.key not in labels:
                    return False
                try:
                    actual = int(labels[self.key])
                except ValueError:
                    return False
                expected = int(self.values[0])
                return actual < expected if self.operator is Operator.LESS_THAN else actual > expected
            case _:
                raise RuntimeError(f"Unsupported operator: {self.operator!r}")


@dataclasses.dataclass(frozen=True)
class LabelSelector:
    """
    A conjunction of requirements. An empty selector matches everything.
    """
    requirements: tuple[Requirement, ...] = ()

    def __str__(self) -> str:
        return ','.join(str(requirement) for requirement in self.requirements)

    def __iter__(self) -> Iterator[Requirement]:
        return iter(self.requirements)

    def __bool__(self) -> bool:
        return bool(self.requirements)

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        return all(requirement.matches(labels or {}) for requirement in self.requirements)


def parse(text: str) -> LabelSelector:
    """
    Parse a selector from its text representation; raise if it is malformed.
    """
    if not text.strip():
        return LabelSelector()
    return LabelSelector(tuple(_parse_requirement(part) for part in _split(text)))


def _split(text: str) -> Iterator[str]:
    """ Split by commas, except for the commas inside of the parentheses. """
    depth = 0
    start = 0
    for idx, char in enumerate(text):
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth < 0:
                raise SelectorError(f"Unbalanced parentheses in the selector: {text!r}")
        elif char == ',' and depth == 0:
            yield text[start:idx]
            start = idx + 1
    if depth != 0:
        raise SelectorError(f"Unbalanced parentheses in the selector: {text!r}")
    yield text[start:]


def _parse_requirement(text: str) -> Requirement:
    text = text.strip()
    if not text:
        raise SelectorError("Empty requirement in the selector.")

    if m := _SET_REQUIREMENT.match(text):
        values = tuple(value.strip() for value in m.group('values').split(','))
        operator = Operator.IN if m.group('op') == 'in' else Operator.NOT_IN
        requirement = Requirement(key=m.group('key'), operator=operator, values=values)
    elif m := _VALUE_REQUIREMENT.match(text):
        op = m.group('op')
        operator = Operator.EQUALS if op == '==' else Operator(op)
        requirement = Requirement(key=m.group('key'), operator=operator, values=(m.group('value'),))
    elif m := _ABSENCE_REQUIREMENT.match(text):
        requirement = Requirement(key=m.group('key'), operator=Operator.DOES_NOT_EXIST)
    elif m := _PRESENCE_REQUIREMENT.match(text):
        requirement = Requirement(key=m.group('key'), operator=Operator.EXISTS)
    else:
        raise SelectorError(f"Unparseable requirement in the selector: {text!r}")

    validate_key(requirement.key)
    for value in requirement.values:
        validate_value(value)
    if requirement.operator in (Operator.LESS_THAN, Operator.GREATER_THAN):
        try:
            int(requirement.values[0])
        except ValueError:
            raise SelectorError(f"An integer is required for {requirement.operator.value!r} "
                                f"in the requirement: {text!r}") from None
    return requirement


def validate_key(key: str) -> None:
    prefix, _, name = key.rpartition('/')
    if '/' in key and not prefix:
        raise SelectorError(f"The label key's prefix must be non-empty: {key!r}")
    if prefix and (len(prefix) > _PREFIX_MAX_LENGTH or not _PREFIX_PATTERN.match(prefix)):
        raise SelectorError(f"The label key's prefix must be a DNS subdomain: {key!r}")
    if len(name) > _NAME_MAX_LENGTH or not _NAME_PATTERN.match(name):
        raise SelectorError(f"The label key's name is invalid: {key!r}")


def validate_value(value: str) -> None:
    if value and (len(value) > _NAME_MAX_LENGTH or not _NAME_PATTERN.match(value)):
        raise SelectorError(f"The label value is invalid: {value!r}")
