from pydantic import BaseModel

from agenda.services.conflict_service import Conflict, ConflictKind, blocks_commit


class ConflictOut(BaseModel):
    kind: ConflictKind
    severity: int
    description: str
    related_id: str

    @classmethod
    def from_conflict(cls, conflict: Conflict) -> "ConflictOut":
        return cls(
            kind=conflict.kind,
            severity=conflict.severity,
            description=conflict.description,
            related_id=conflict.related_id,
        )


class ConflictReport(BaseModel):
    conflicts: list[ConflictOut]
    blocking: bool

    @classmethod
    def from_conflicts(cls, conflicts: list[Conflict]) -> "ConflictReport":
        return cls(
            conflicts=[ConflictOut.from_conflict(item) for item in conflicts],
            blocking=blocks_commit(conflicts),
        )
