from __future__ import annotations

from messaging_hub.domain.entities.message import Sender
from messaging_hub.domain.entities.user import User
from messaging_hub.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        first_name=model.first_name,
        last_name=model.last_name,
        role=model.role,
    )


def model_to_sender(model: UserModel) -> Sender:
    return Sender(
        id=model.id,
        display_name=model_to_entity(model).display_name,
        role=model.role,
    )
