"""
Shared pytest fixtures for the StoryForge test suite.

Provides:
    - settings: Settings pointing at a per-test SQLite file
    - database: initialised Database (tables created, seed data loaded)
    - db: one transactional session on that database
    - fake_ado: in-memory stand-in for AdoClient
    - app: FastAPI app wired to the test database and fake_ado
    - client: httpx AsyncClient over ASGITransport
"""
import re

import httpx
import pytest

from storyforge.config import Settings, get_settings
from storyforge.database import Database
from storyforge.deps import get_ado_client
from storyforge.exceptions import AdoApiError
from storyforge.main import create_app
from storyforge.schemas.work_item import WikiPage, WorkItem


class FakeAdoClient:
    """Serves work items from memory and records every write.

    WIQL is matched loosely: child queries by their parent id list, feature
    queries by type and excluded states, anything else returns open items.
    """

    org_url = "https://dev.azure.com/contoso"
    project = "Web"

    def __init__(self) -> None:
        self.items: dict[int, WorkItem] = {}
        self.queries: list[str] = []
        self.updates: list[tuple[int, list[dict]]] = []
        self.created: list[tuple[str, list[dict]]] = []
        self.relations: dict[int, list[dict]] = {}
        self.wiki_pages: dict[str, WikiPage] = {}
        self.failing_ids: set[int] = set()
        self.fail_queries = False
        self.fail_children = False
        self.fail_wiki = False

    def add(self, **fields) -> WorkItem:
        item = WorkItem(**fields)
        self.items[item.id] = item
        return item

    async def aclose(self) -> None:
        pass

    def work_item_url(self, work_item_id: int) -> str:
        return f"{self.org_url}/{self.project}/_workitems/edit/{work_item_id}/"

    def api_work_item_url(self, work_item_id: int) -> str:
        return f"{self.org_url}/_apis/wit/workItems/{work_item_id}"

    async def query_work_items(self, wiql: str) -> list[WorkItem]:
        self.queries.append(wiql)
        if self.fail_queries:
            raise AdoApiError("Service unavailable", status=503)
        parent_match = re.search(r"\[System\.Parent\] IN \(([\d, ]+)\)", wiql)
        if parent_match:
            if self.fail_children:
                raise AdoApiError("Child query failed", status=500)
            parents = {int(i) for i in parent_match.group(1).split(",")}
            return [i for i in self.items.values() if i.parent_id in parents]
        excluded_match = re.search(r"\[System\.State\] NOT IN \(([^)]*)\)", wiql)
        excluded = set(re.findall(r"'([^']*)'", excluded_match.group(1))) if excluded_match else set()
        items = [i for i in self.items.values() if i.state not in excluded]
        if "[System.WorkItemType] = 'Feature'" in wiql:
            items = [i for i in items if i.type == "Feature"]
        return items

    async def get_work_items(self, ids: list[int]) -> list[WorkItem]:
        return [self.items[i] for i in ids if i in self.items]

    async def get_work_item(self, work_item_id: int) -> WorkItem:
        if work_item_id not in self.items:
            raise AdoApiError(f"Work item {work_item_id} does not exist", status=404)
        return self.items[work_item_id]

    async def get_children_of(self, parent_ids: list[int], types: list[str] | None = None) -> list[WorkItem]:
        if not parent_ids:
            return []
        return await self.query_work_items(
            f"SELECT [System.Id] FROM WorkItems WHERE [System.Parent] IN ({', '.join(map(str, parent_ids))})"
        )

    async def get_child_work_items(self, parent_id: int, types: list[str] | None = None) -> list[WorkItem]:
        return await self.get_children_of([parent_id], types)

    async def get_relations(self, work_item_id: int) -> list[dict]:
        return self.relations.get(work_item_id, [])

    async def create_work_item(self, work_item_type: str, operations: list[dict]) -> WorkItem:
        self.created.append((work_item_type, operations))
        title = next(op["value"] for op in operations if op["path"] == "/fields/System.Title")
        return self.add(id=1000 + len(self.created), type=work_item_type, title=title, state="New")

    async def update_work_item(self, work_item_id: int, operations: list[dict]) -> WorkItem:
        if work_item_id in self.failing_ids:
            raise AdoApiError(f"TF401232: Work item {work_item_id} does not exist", status=404)
        self.updates.append((work_item_id, operations))
        return self.items.get(work_item_id) or WorkItem(id=work_item_id)

    async def find_wiki_page_by_title(self, page_title: str) -> WikiPage | None:
        if self.fail_wiki:
            raise AdoApiError("Wiki unavailable", status=500)
        return self.wiki_pages.get(page_title.lower())


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'storyforge.db'}",
        app_env="testing",
        cache_refresh_enabled=False,
    )


@pytest.fixture
async def database(settings):
    database = Database(settings.database_url)
    await database.init()
    yield database
    await database.close()


@pytest.fixture
async def db(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def fake_ado():
    return FakeAdoClient()


@pytest.fixture
def app(settings, database, fake_ado):
    application = create_app(settings)
    application.state.db = database
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_ado_client] = lambda: fake_ado
    return application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
