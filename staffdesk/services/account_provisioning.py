"""
Account provisioning against the managed auth service's admin API.
Used when an employment contract is accepted.
"""

import logging
import secrets
import string
from typing import Any, Optional

import httpx

from ..config import AUTH_ADMIN_URL, AUTH_SERVICE_ROLE_KEY

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits
PASSWORD_LENGTH = 7
EMPLOYEE_ROLE = "employee"


class AccountProvisioningError(Exception):
    """The auth admin API rejected or could not process a request"""


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class AccountProvisioningService:
    """Thin client for the auth admin users endpoints"""

    def __init__(self, base_url: Optional[str] = None, service_key: Optional[str] = None):
        self.base_url = (base_url or AUTH_ADMIN_URL or "").rstrip("/")
        self.service_key = service_key or AUTH_SERVICE_ROLE_KEY

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key or "",
            "Content-Type": "application/json",
        }

    def _ensure_configured(self):
        if not self.base_url or not self.service_key:
            logger.error("❌ AUTH_ADMIN_URL or AUTH_SERVICE_ROLE_KEY not configured")
            raise AccountProvisioningError("Auth admin API not configured")

    async def find_user_by_email(self, email: str) -> Optional[dict[str, Any]]:
        self._ensure_configured()
        target = email.lower()
        page = 1
        async with httpx.AsyncClient(timeout=15.0) as client:
            while True:
                response = await client.get(
                    f"{self.base_url}/admin/users",
                    headers=self._headers(),
                    params={"page": page, "per_page": 200},
                )
                if response.status_code >= 400:
                    raise AccountProvisioningError(
                        f"Failed to check existing users: {response.status_code} {response.text}"
                    )
                users = response.json().get("users", [])
                for user in users:
                    if (user.get("email") or "").lower() == target:
                        return user
                if len(users) < 200:
                    return None
                page += 1

    async def create_user(self, email: str, password: str, metadata: dict) -> dict[str, Any]:
        self._ensure_configured()
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.post(
                f"{self.base_url}/admin/users",
                headers=self._headers(),
                json={
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata,
                },
            )
        if response.status_code >= 400:
            raise AccountProvisioningError(
                f"Failed to create user account: {response.status_code} {response.text}"
            )
        return response.json()

    async def update_user(self, user_id: str, password: str, metadata: dict) -> dict[str, Any]:
        self._ensure_configured()
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.put(
                f"{self.base_url}/admin/users/{user_id}",
                headers=self._headers(),
                json={"password": password, "user_metadata": metadata},
            )
        if response.status_code >= 400:
            raise AccountProvisioningError(
                f"Failed to update existing user: {response.status_code} {response.text}"
            )
        return response.json()


async def provision_employee_account(
    email: str, first_name: str, last_name: str, password: str
) -> tuple[str, bool]:
    """
    Create the employee's login, or reset the password of an existing one

    Returns:
        Tuple of (user_id, account_existed)
    """
    service = AccountProvisioningService()
    metadata = {"first_name": first_name, "last_name": last_name, "role": EMPLOYEE_ROLE}

    existing = await service.find_user_by_email(email)
    if existing:
        logger.info("👤 User already exists, updating password")
        user = await service.update_user(existing["id"], password, metadata)
        user_id = user.get("id") or existing["id"]
        logger.info(f"✅ Existing user updated: {user_id}")
        return user_id, True

    user = await service.create_user(email, password, metadata)
    user_id = user.get("id") or (user.get("user") or {}).get("id")
    if not user_id:
        raise AccountProvisioningError("Auth admin API returned no user id")
    logger.info(f"✅ New user account created: {user_id}")
    return user_id, False
