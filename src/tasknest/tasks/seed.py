# src/tasknest/tasks/seed.py

"""
Built-in sample data used on first run (nothing persisted yet).

Ids are short fixed strings; generated ids are 32-char hex, so they never clash.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from .models import Folder, Priority, SubTask, Tag, Task, Workspace, utc_now


def default_workspaces() -> list[Workspace]:
    return [
        Workspace(id="1", name="Pessoal", icon="home", color="#4c6ef5"),
        Workspace(id="2", name="Trabalho", icon="briefcase", color="#ff922b"),
    ]


def default_tags() -> list[Tag]:
    return [
        Tag(id="1", name="Trabalho", color="#4c6ef5"),
        Tag(id="2", name="Urgente", color="#fa5252"),
        Tag(id="3", name="Reunião", color="#82c91e"),
        Tag(id="4", name="Projeto", color="#be4bdb"),
        Tag(id="5", name="Família", color="#ff922b"),
    ]


def default_folders() -> list[Folder]:
    return [
        Folder(id="1", name="Projetos", workspace_id="1", color="#4c6ef5", icon="folder"),
        Folder(id="2", name="Clientes", workspace_id="2", color="#ff922b", icon="users"),
        Folder(id="3", name="Documentos", workspace_id="2", color="#82c91e", icon="file-text"),
    ]


def default_tasks(now: datetime | None = None) -> list[Task]:
    now = now or utc_now()
    tags = {t.id: t for t in default_tags()}

    def days(n: int) -> datetime:
        return now + timedelta(days=n)

    return [
        Task(
            id="1",
            title="Criar apresentação para reunião",
            description="Preparar slides para a reunião de quinta-feira",
            due_date=days(3),
            priority=Priority.HIGH,
            tags=(tags["1"], tags["4"]),
            workspace_id="2",
            folder_id="3",
            created_at=now,
            updated_at=now,
            subtasks=(
                SubTask(
                    id="1-1",
                    parent_id="1",
                    title="Coletar dados para gráficos",
                    description="Obter dados de vendas do último trimestre",
                    due_date=days(1),
                    priority=Priority.MEDIUM,
                    tags=(tags["1"],),
                    workspace_id="2",
                    folder_id="3",
                    created_at=now,
                    updated_at=now,
                ),
            ),
        ),
        Task(
            id="2",
            title="Comprar mantimentos",
            description="Leite, ovos, pão, frutas",
            due_date=days(1),
            priority=Priority.MEDIUM,
            tags=(tags["5"],),
            workspace_id="1",
            folder_id=None,
            created_at=now,
            updated_at=now,
        ),
        Task(
            id="3",
            title="Revisar contrato do cliente",
            description="Verificar cláusulas contratuais antes da renovação",
            due_date=days(2),
            priority=Priority.URGENT,
            tags=(tags["1"], tags["2"]),
            workspace_id="2",
            folder_id="2",
            created_at=now,
            updated_at=now,
        ),
    ]
