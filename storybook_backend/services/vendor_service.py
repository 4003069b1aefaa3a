from __future__ import annotations

import secrets
import time
from typing import Any, Dict, List, Optional

from ..integrations.service_error import ServiceError
from ..repositories import invite_repository, user_repository

INVITE_ROLES = ("admin", "vendor")


def list_vendors() -> List[Dict[str, Any]]:
    return [
        {
            "vendorId": user.get("id"),
            "name": user.get("name") or user.get("email") or user.get("id"),
            "contactEmail": user.get("email") or "",
            "active": user.get("active", True),
        }
        for user in user_repository.list_by_role("vendor")
    ]


def create_invite(role: Optional[str], created_by: str) -> Dict[str, Any]:
    role = (role or "vendor").strip().lower()
    if role not in INVITE_ROLES:
        raise ServiceError(f"role must be one of {', '.join(INVITE_ROLES)}")
    code = f"{role.upper()}-{secrets.token_hex(4).upper()}"
    invite = invite_repository.insert(
        code,
        {"role": role, "isUsed": False, "createdAt": int(time.time() * 1000), "createdBy": created_by},
    )
    return {"code": code, **invite}


def consume_invite(code: str, role: Optional[str], used_by: Optional[str] = None) -> Dict[str, Any]:
    """Validate an invite for the intended role and mark it used."""
    invite = invite_repository.find_by_code((code or "").strip())
    if invite is None:
        raise ServiceError("Invalid invite code", 404)
    if invite.get("isUsed"):
        raise ServiceError("Invite code already used")
    if role and invite.get("role") != role:
        raise ServiceError(f"Invite code is for role {invite.get('role')}")

    updated = invite_repository.update(
        invite["id"],
        {"isUsed": True, "usedAt": int(time.time() * 1000), "usedBy": used_by},
    )
    return {"code": invite["id"], "role": invite.get("role"), "isUsed": bool((updated or {}).get("isUsed"))}
