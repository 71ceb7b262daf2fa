from __future__ import annotations

import os
from typing import Any

from supabase import Client, create_client

from propmatch.core.models import Project


PROJECTS_TABLE = "projects"


class SupabaseRepo:
    def __init__(
        self,
        url: str | None = None,
        service_role_key: str | None = None,
        client: Client | None = None,
    ) -> None:
        if client is not None:
            self.client = client
            return
        supabase_url = url or os.environ.get("SUPABASE_URL")
        supabase_key = service_role_key or os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required.")
        self.client = create_client(supabase_url, supabase_key)

    def get_projects(self) -> list[Project]:
        rows = self.client.table(PROJECTS_TABLE).select("*").order("id").execute().data or []
        return [Project.from_dict(row) for row in rows]

    def get_project_by_id(self, project_id: str) -> Project | None:
        rows = (
            self.client.table(PROJECTS_TABLE)
            .select("*")
            .eq("id", project_id)
            .limit(1)
            .execute()
            .data
            or []
        )
        return Project.from_dict(rows[0]) if rows else None

    def update_project_nearby(self, project: Project) -> dict[str, Any]:
        """
        Store enrichment for an existing catalog row; core fields stay untouched.
        """
        row = project.to_dict()
        update_row = {
            "nearby": row.get("nearby"),
            "geocode_precision": row.get("geocode_precision"),
        }
        response = self.client.table(PROJECTS_TABLE).update(update_row).eq("id", project.id).execute()
        return (response.data or [{}])[0]
