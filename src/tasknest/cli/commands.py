# src/tasknest/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, time
from typing import TypeVar

from ..core.state import AppState
from ..tasks import query
from ..tasks.models import (
    FolderDraft,
    FolderPatch,
    Priority,
    Status,
    Tag,
    TagPatch,
    Task,
    TaskDraft,
    TaskPatch,
    Workspace,
    WorkspaceDraft,
    WorkspacePatch,
)

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        logger.debug("Command /%s args=%s", name, args)

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

NO_WORKSPACE = "No current workspace. Use /ws add <name> or /ws use <n>."


# ---- helpers ----


def resolve(items: Sequence[T], ref: str, key: Callable[[T], str]) -> T | None:
    """
    Resolve a user reference against a listing: 1-based position, exact id,
    or an unambiguous id prefix.
    """
    if ref.isdigit() and 1 <= int(ref) <= len(items):
        return items[int(ref) - 1]
    for item in items:
        if key(item) == ref:
            return item
    matches = [i for i in items if key(i).startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _due_from_text(raw: str) -> datetime:
    # Due at the end of the given local day.
    return datetime.combine(date.fromisoformat(raw), time(23, 59)).astimezone()


def _fmt_due(dt: datetime | None) -> str:
    return dt.astimezone().strftime("%Y-%m-%d") if dt else "-"


def _fmt_task(n: int, t: Task) -> str:
    mark = "x" if t.completed else " "
    tags = f" [{', '.join(tag.name for tag in t.tags)}]" if t.tags else ""
    subs = f" ({sum(s.completed for s in t.subtasks)}/{len(t.subtasks)})" if t.subtasks else ""
    return f"{n}. [{mark}] {t.title} <{t.priority}, {t.status}, due {_fmt_due(t.due_date)}>{tags}{subs}"


def _fmt_tasks(title: str, tasks: Sequence[Task]) -> str:
    if not tasks:
        return f"{title}: none."
    return "\n".join([f"{title}:", *(_fmt_task(i, t) for i, t in enumerate(tasks, start=1))])


def _workspace_tasks(state: AppState) -> list[Task] | None:
    ws = state.workspaces.current
    if ws is None:
        return None
    return state.tasks.tasks_by_workspace(ws.id)


def _find_task(state: AppState, ref: str) -> Task | None:
    tasks = _workspace_tasks(state) or []
    return resolve(tasks, ref, lambda t: t.id)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_ws(state: AppState, args: list[str]) -> str:
    """
    /ws                  -> list workspaces
    /ws use <n>          -> switch
    /ws add <name>       -> create
    /ws rename <n> <name>
    /ws rm <n>
    """
    items = state.workspaces.list_workspaces()
    if not args:
        if not items:
            return "No workspaces."
        cur = state.workspaces.current
        lines = ["Workspaces:"]
        for i, w in enumerate(items, start=1):
            star = "*" if cur is not None and cur.id == w.id else " "
            lines.append(f"{star}{i}. {w.name}")
        return "\n".join(lines)

    sub, rest = args[0].lower(), args[1:]
    if sub == "add":
        ws_new = state.workspaces.add_workspace(WorkspaceDraft(name=" ".join(rest)))
        return f"Workspace added: {ws_new.name}" if ws_new else "Workspace not added."

    if not rest:
        return "Usage: /ws use|rename|rm <n> ..."
    ws: Workspace | None = resolve(items, rest[0], lambda w: w.id)
    if ws is None:
        return f"No workspace matches {rest[0]!r}."

    if sub == "use":
        state.workspaces.set_current(ws)
        return f"Current workspace: {ws.name}"
    if sub == "rename":
        updated = state.workspaces.update_workspace(ws.id, WorkspacePatch(name=" ".join(rest[1:])))
        return f"Workspace renamed: {updated.name}" if updated else "Workspace not renamed."
    if sub in ("rm", "del"):
        state.workspaces.delete_workspace(ws.id)
        cur = state.workspaces.current
        return f"Workspace removed. Current: {cur.name if cur else 'none'}"
    return "Usage: /ws [use|add|rename|rm] ..."


def cmd_tag(state: AppState, args: list[str]) -> str:
    """
    /tag                     -> list tags
    /tag add <name> [#color]
    /tag rename <n> <name>
    /tag rm <n>
    """
    items = state.tags.list_tags()
    if not args:
        if not items:
            return "No tags."
        return "\n".join(["Tags:", *(f"{i}. {t.name} {t.color}" for i, t in enumerate(items, start=1))])

    sub, rest = args[0].lower(), args[1:]
    if sub == "add":
        color = "#4c6ef5"
        if rest and rest[-1].startswith("#") and len(rest) > 1:
            color = rest.pop()
        tag_new = state.tags.add_tag(" ".join(rest), color)
        return f"Tag added: {tag_new.name}" if tag_new else "Tag not added."

    if not rest:
        return "Usage: /tag rename|rm <n> ..."
    tag: Tag | None = resolve(items, rest[0], lambda t: t.id)
    if tag is None:
        return f"No tag matches {rest[0]!r}."
    if sub == "rename":
        updated = state.tags.update_tag(tag.id, TagPatch(name=" ".join(rest[1:])))
        return f"Tag renamed: {updated.name}" if updated else "Tag not renamed."
    if sub in ("rm", "del"):
        state.tags.delete_tag(tag.id)
        return f"Tag removed: {tag.name}"
    return "Usage: /tag [add|rename|rm] ..."


def cmd_folder(state: AppState, args: list[str]) -> str:
    """
    /folder                  -> folders of the current workspace (with task counts)
    /folder add <name>
    /folder rename <n> <name>
    /folder rm <n>           -> tasks inside move to "no folder"
    """
    ws = state.workspaces.current
    if ws is None:
        return NO_WORKSPACE
    items = state.folders.list_folders(ws.id)

    if not args:
        if not items:
            return f"No folders in {ws.name}."
        lines = [f"Folders in {ws.name}:"]
        for i, f in enumerate(items, start=1):
            lines.append(f"{i}. {f.name} ({len(state.tasks.tasks_by_folder(f.id))} task(s))")
        return "\n".join(lines)

    sub, rest = args[0].lower(), args[1:]
    if sub == "add":
        folder_new = state.folders.add_folder(FolderDraft(name=" ".join(rest), workspace_id=ws.id))
        return f"Folder added: {folder_new.name}" if folder_new else "Folder not added."

    if not rest:
        return "Usage: /folder rename|rm <n> ..."
    folder = resolve(items, rest[0], lambda f: f.id)
    if folder is None:
        return f"No folder matches {rest[0]!r}."
    if sub == "rename":
        updated = state.folders.update_folder(folder.id, FolderPatch(name=" ".join(rest[1:])))
        return f"Folder renamed: {updated.name}" if updated else "Folder not renamed."
    if sub in ("rm", "del"):
        moved = len(state.tasks.tasks_by_folder(folder.id))
        state.folders.delete_folder(folder.id)
        return f"Folder removed: {folder.name} ({moved} task(s) moved to no folder)"
    return "Usage: /folder [add|rename|rm] ..."


def _parse_task_words(state: AppState, words: list[str]) -> tuple[str, dict]:
    """
    Split "/task add" words into a title and options:
    !priority  @YYYY-MM-DD  #tag  +folder
    """
    title_words: list[str] = []
    opts: dict = {}
    tags: list[Tag] = []
    for w in words:
        if w.startswith("!") and w[1:] in {p.value for p in Priority}:
            opts["priority"] = Priority(w[1:])
        elif w.startswith("@") and len(w) > 1:
            opts["due_date"] = _due_from_text(w[1:])
        elif w.startswith("#") and len(w) > 1:
            tag = state.tags.find_by_name(w[1:])
            if tag is None:
                raise ValueError(f"unknown tag {w[1:]!r}")
            tags.append(tag)
        elif w.startswith("+") and len(w) > 1:
            ws = state.workspaces.current
            folders = state.folders.list_folders(ws.id if ws else None)
            folder = resolve(folders, w[1:], lambda f: f.id) or next(
                (f for f in folders if f.name.casefold() == w[1:].casefold()), None
            )
            if folder is None:
                raise ValueError(f"unknown folder {w[1:]!r}")
            opts["folder_id"] = folder.id
        else:
            title_words.append(w)
    if tags:
        opts["tags"] = tuple(tags)
    return " ".join(title_words), opts


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task                         -> tasks of the current workspace
    /task add <title> [!urgent] [@2026-01-31] [#tag] [+folder]
    /task show <n>
    /task done <n>                -> toggle completion
    /task status <n> <todo|in-progress|completed>
    /task edit <n> <title>
    /task move <n> <folder|none>
    /task rm <n>
    """
    ws = state.workspaces.current
    if ws is None:
        return NO_WORKSPACE

    if not args:
        return _fmt_tasks(f"Tasks in {ws.name}", state.tasks.tasks_by_workspace(ws.id))

    sub, rest = args[0].lower(), args[1:]
    if sub == "add":
        try:
            title, opts = _parse_task_words(state, rest)
        except ValueError as e:
            return f"Task not added: {e}."
        task_new = state.tasks.add_task(TaskDraft(title=title, workspace_id=ws.id, **opts))
        return f"Task added: {task_new.title}" if task_new else "Task not added."

    if not rest:
        return "Usage: /task <show|done|status|edit|move|rm> <n> ..."
    task = _find_task(state, rest[0])
    if task is None:
        return f"No task matches {rest[0]!r}."

    if sub == "show":
        state.tasks.select_task(task.id)
        lines = [
            f"{task.title} [{task.id}]",
            f"  {task.description}" if task.description else "  (no description)",
            f"  priority={task.priority} status={task.status} due={_fmt_due(task.due_date)}",
        ]
        for i, s in enumerate(task.subtasks, start=1):
            lines.append(f"  {i}. [{'x' if s.completed else ' '}] {s.title} <{s.status}>")
        return "\n".join(lines)
    if sub == "done":
        updated = state.tasks.toggle_task_completion(task.id)
        return f"{updated.title}: {updated.status}" if updated else "Task not changed."
    if sub == "status":
        if len(rest) < 2 or rest[1] not in {s.value for s in Status}:
            return "Usage: /task status <n> <todo|in-progress|completed>"
        updated = state.tasks.update_task_status(task.id, Status(rest[1]))
        return f"{updated.title}: {updated.status}" if updated else "Task not changed."
    if sub == "edit":
        updated = state.tasks.update_task(task.id, TaskPatch(title=" ".join(rest[1:])))
        return f"Task renamed: {updated.title}" if updated else "Task not changed."
    if sub == "move":
        if len(rest) < 2:
            return "Usage: /task move <n> <folder|none>"
        folder_id = None
        if rest[1].lower() != "none":
            folder = resolve(state.folders.list_folders(ws.id), rest[1], lambda f: f.id)
            if folder is None:
                return f"No folder matches {rest[1]!r}."
            folder_id = folder.id
        state.tasks.move_task(task.id, folder_id)
        return f"Task moved: {task.title}"
    if sub in ("rm", "del"):
        state.tasks.delete_task(task.id)
        return f"Task removed: {task.title}"
    return "Usage: /task [add|show|done|status|edit|move|rm] ..."


def cmd_sub(state: AppState, args: list[str]) -> str:
    """
    /sub add <task> <title>
    /sub done <task> <n>
    /sub rm <task> <n>
    """
    if len(args) < 3:
        return "Usage: /sub add <task> <title> | /sub done|rm <task> <n>"
    sub, task_ref, rest = args[0].lower(), args[1], args[2:]
    task = _find_task(state, task_ref)
    if task is None:
        return f"No task matches {task_ref!r}."

    if sub == "add":
        created = state.tasks.add_subtask(task.id, TaskDraft(title=" ".join(rest)))
        return f"Subtask added: {created.title}" if created else "Subtask not added."

    item = resolve(task.subtasks, rest[0], lambda s: s.id)
    if item is None:
        return f"No subtask matches {rest[0]!r}."
    if sub == "done":
        updated = state.tasks.toggle_subtask_completion(task.id, item.id)
        return f"{updated.title}: {updated.status}" if updated else "Subtask not changed."
    if sub in ("rm", "del"):
        state.tasks.delete_subtask(task.id, item.id)
        return f"Subtask removed: {item.title}"
    return "Usage: /sub [add|done|rm] ..."


def cmd_today(state: AppState, args: list[str]) -> str:
    tasks = _workspace_tasks(state)
    if tasks is None:
        return NO_WORKSPACE
    return _fmt_tasks("Due today", query.tasks_by_due_date(tasks, date.today()))


def cmd_upcoming(state: AppState, args: list[str]) -> str:
    tasks = _workspace_tasks(state)
    if tasks is None:
        return NO_WORKSPACE
    days = int(getattr(state.settings, "upcoming_days", 3))
    if args and args[0].isdigit():
        days = int(args[0])
    due = query.sort_by_due_date(query.tasks_due_within(tasks, days))
    return _fmt_tasks(f"Due in the next {days} day(s)", due)


def cmd_priority(state: AppState, args: list[str]) -> str:
    tasks = _workspace_tasks(state)
    if tasks is None:
        return NO_WORKSPACE
    groups = query.tasks_by_priority(query.pending_tasks(tasks))
    return "\n".join(_fmt_tasks(p.value.capitalize(), items) for p, items in groups.items())


def cmd_summary(state: AppState, args: list[str]) -> str:
    ws = state.workspaces.current
    tasks = _workspace_tasks(state)
    if ws is None or tasks is None:
        return NO_WORKSPACE
    s = query.summarize(tasks, upcoming_days=int(getattr(state.settings, "upcoming_days", 3)))
    return (
        f"{ws.name}:\n"
        f"  Pending: {s.pending}\n"
        f"  Completed: {s.completed} (today: {s.completed_today})\n"
        f"  Upcoming: {s.upcoming}\n"
        f"  Total: {s.total}"
    )


def cmd_search(state: AppState, args: list[str]) -> str:
    tasks = _workspace_tasks(state)
    if tasks is None:
        return NO_WORKSPACE
    text = " ".join(args)
    return _fmt_tasks(f"Matching {text!r}", query.search_tasks(tasks, text))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("ws", cmd_ws, help_text="Workspaces: /ws | /ws use|add|rename|rm ...")
registry.register("tag", cmd_tag, help_text="Tags: /tag | /tag add|rename|rm ...")
registry.register("folder", cmd_folder, help_text="Folders: /folder | /folder add|rename|rm ...")
registry.register(
    "task", cmd_task, help_text="Tasks: /task | /task add|show|done|status|edit|move|rm ...", aliases=["t"]
)
registry.register("sub", cmd_sub, help_text="Subtasks: /sub add|done|rm <task> ...")
registry.register("today", cmd_today, help_text="Tasks due today.")
registry.register("upcoming", cmd_upcoming, help_text="Pending tasks due soon: /upcoming [days].")
registry.register("priority", cmd_priority, help_text="Pending tasks grouped by priority.")
registry.register("summary", cmd_summary, help_text="Counters for the current workspace.")
registry.register("search", cmd_search, help_text="Search titles/descriptions: /search <text>.")
