"""Supabase administrator credential store."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from offer_catalog.domain.admins import AdministratorRecord
from offer_catalog.services.credentials import AdminRepository

_TABLE = "admins"
_NIL_ID = "00000000-0000-0000-0000-000000000000"


@dataclass
class SupabaseAdminRepository(AdminRepository):
    """Supabase implementation for administrator records."""

    client: Client

    def get_by_email(self, email: str) -> AdministratorRecord | None:
        """Return the administrator with a normalized email, if present."""
        response = (
            self.client.table(_TABLE)
            .select("id, email, name, password_hash")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _admin_from_row(response.data[0])

    def create_admin(
        self, email: str, name: str, password_hash: str
    ) -> AdministratorRecord:
        """Create an administrator row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert({"email": email, "name": name, "password_hash": password_hash})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create administrator")
        return _admin_from_row(response.data[0])

    def count_admins(self) -> int:
        """Return the number of administrators."""
        response = self.client.table(_TABLE).select("id", count="exact").execute()
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def delete_all_admins(self) -> int:
        """Delete every administrator row."""
        response = self.client.table(_TABLE).delete().neq("id", _NIL_ID).execute()
        return len(response.data or [])


def _admin_from_row(row: dict[str, object]) -> AdministratorRecord:
    return AdministratorRecord(
        id=UUID(str(row["id"])),
        email=str(row["email"]),
        name=str(row["name"]),
        password_hash=str(row["password_hash"]),
    )
