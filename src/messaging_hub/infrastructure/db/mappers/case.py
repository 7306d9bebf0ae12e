from __future__ import annotations

from messaging_hub.domain.entities.case import Case
from messaging_hub.infrastructure.db.models.case import CaseModel


def model_to_entity(model: CaseModel) -> Case:
    return Case(
        id=model.id,
        case_number=model.case_number,
        owner_id=model.owner_id,
        assigned_specialist_id=model.assigned_specialist_id,
        status=model.status,
        priority=model.priority,
        issue_type=model.issue_type,
    )
