from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.constants import DEFAULT_AVATAR_URL
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a registered student or faculty member.

    Note: Plain data object, no storage access. `password` is opaque to the
    core (a Werkzeug hash once it went through registration).
    """

    user_id: str
    name: str
    email: str
    password: str
    role: Role
    department: str
    student_class: Optional[str] = None
    roll_number: Optional[str] = None
    avatar_url: str = DEFAULT_AVATAR_URL

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "role": self.role.value,
            "department": self.department,
            "avatarUrl": self.avatar_url,
        }
        if self.student_class is not None:
            data["class"] = self.student_class
        if self.roll_number is not None:
            data["rollNumber"] = self.roll_number
        return data

    def to_public_dict(self) -> dict[str, Any]:
        data = self.to_dict()
        data.pop("password")
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            user_id=str(data["id"]),
            name=data["name"],
            email=data["email"],
            password=data.get("password", ""),
            role=Role(data["role"]),
            department=data.get("department", ""),
            student_class=data.get("class"),
            roll_number=data.get("rollNumber"),
            avatar_url=data.get("avatarUrl", DEFAULT_AVATAR_URL),
        )
