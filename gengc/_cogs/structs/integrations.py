"""
The integrations as seen by the garbage collector.

Only the identity, the generation, and the lifecycle phase are relevant.
The rest of the integration's body belongs to the reconciler.
"""
import dataclasses
import enum

from gengc._cogs.structs import bodies, references


class IntegrationPhase(str, enum.Enum):
    NONE = ''
    INITIALIZATION = 'Initialization'
    BUILDING_KIT = 'Building Kit'
    DEPLOYING = 'Deploying'
    RUNNING = 'Running'
    ERROR = 'Error'


@dataclasses.dataclass(frozen=True)
class Integration:
    namespace: references.NamespaceName
    name: str
    generation: int
    phase: IntegrationPhase = IntegrationPhase.NONE

    @classmethod
    def from_body(cls, body: bodies.RawBody) -> "Integration":
        metadata = body.get('metadata', {})
        status = body.get('status', {})
        return cls(
            namespace=references.NamespaceName(metadata['namespace']),
            name=metadata['name'],
            generation=int(metadata.get('generation', 0)),
            phase=IntegrationPhase(status.get('phase', '')),
        )

    def in_phase(self, *phases: IntegrationPhase) -> bool:
        return self.phase in phases
