"""Azure DevOps work item API routes: backlog, duplicate search, edits and details."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.config import Settings, get_settings
from storyforge.database import get_db
from storyforge.deps import get_ado_client, get_area_path, get_work_item_types
from storyforge.engine.hierarchy import build_hierarchy
from storyforge.engine.progress import annotate_tree, shallow_progress
from storyforge.exceptions import AdoApiError, ValidationError
from storyforge.schemas.search import (
    CacheRefreshResponse,
    CacheStats,
    SimilarSearchRequest,
    SimilarSearchResponse,
)
from storyforge.schemas.work_item import (
    BacklogResponse,
    EpicListResponse,
    FeatureDetailsResponse,
    WikiSearchResponse,
    WorkItem,
    WorkItemCreate,
    WorkItemListResponse,
    WorkItemMove,
    WorkItemResponse,
    WorkItemUpdate,
    WorkItemUpdateResponse,
)
from storyforge.services import cache_service, field_mapper, wiql
from storyforge.services.ado_client import AdoClient
from storyforge.services.field_mapper import PARENT_LINK

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ado", tags=["ado"])

PARENT_TYPES = ("Epic", "Feature")

Client = Annotated[AdoClient, Depends(get_ado_client)]
WorkItemTypes = Annotated[list[str], Depends(get_work_item_types)]
AreaPath = Annotated[str | None, Depends(get_area_path)]


@router.get("/epics", response_model=EpicListResponse)
async def list_epics(client: Client, types: WorkItemTypes, area_path: AreaPath):
    parent_types = [t for t in types if t in PARENT_TYPES]
    if not parent_types:
        return EpicListResponse(epics=[])
    epics = await client.query_work_items(wiql.epics_and_features_query(parent_types, area_path))
    return EpicListResponse(epics=epics)


@router.get("/work-items/recent", response_model=WorkItemListResponse)
async def recent_work_items(
    client: Client,
    types: WorkItemTypes,
    area_path: AreaPath,
    settings: Annotated[Settings, Depends(get_settings)],
):
    since = cache_service.history_start(settings.cache_history_months)
    items = await client.query_work_items(wiql.recent_work_items_query(types, since, area_path))
    return WorkItemListResponse(work_items=items)


@router.post("/cache/refresh", response_model=CacheRefreshResponse)
async def refresh_cache(
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Client,
    types: WorkItemTypes,
    area_path: AreaPath,
    settings: Annotated[Settings, Depends(get_settings)],
):
    count = await cache_service.refresh_work_items_cache(
        db, client, types, months=settings.cache_history_months, area_path=area_path,
    )
    return CacheRefreshResponse(message=f"Successfully cached {count} work items", count=count)


@router.get("/cache/stats", response_model=CacheStats)
async def get_cache_stats(db: Annotated[AsyncSession, Depends(get_db)]):
    return await cache_service.cache_stats(db)


@router.post("/search", response_model=SimilarSearchResponse)
async def search_duplicates(
    data: SimilarSearchRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    if not data.title:
        raise ValidationError("Title is required for duplicate search", field="title")
    matches = await cache_service.search_similar(
        db,
        data.title,
        data.description,
        limit=data.limit,
        candidate_limit=settings.similarity_candidate_limit,
    )
    return SimilarSearchResponse(matches=matches, count=len(matches))


@router.get("/backlog", response_model=BacklogResponse)
async def get_backlog(client: Client, types: WorkItemTypes, area_path: AreaPath):
    """Active items as a flat list and as a tree with rolled-up progress."""
    items = await client.query_work_items(wiql.active_work_items_query(types, area_path))
    hierarchy = build_hierarchy(items)
    annotate_tree(hierarchy)
    return BacklogResponse(work_items=items, hierarchy=hierarchy, count=len(items))


@router.post("/work-items", response_model=WorkItemResponse, status_code=status.HTTP_201_CREATED)
async def create_work_item(
    data: WorkItemCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Client,
):
    fields = data.model_dump(exclude={"type"})
    parent_url = client.api_work_item_url(data.parent) if data.parent else None
    operations = await field_mapper.build_patch_operations(db, data.type, fields, parent_url=parent_url)
    if not any(op["path"] == "/fields/System.Title" for op in operations):
        raise ValidationError(f"No field mappings for work item type '{data.type}'", field="type")
    work_item = await client.create_work_item(data.type, operations)
    return WorkItemResponse(work_item=work_item)


@router.patch("/work-items/{work_item_id}/update", response_model=WorkItemUpdateResponse)
async def update_work_item(work_item_id: int, data: WorkItemUpdate, client: Client):
    operations = field_mapper.build_update_operations(data.model_dump(exclude_unset=True))
    if not operations:
        raise ValidationError("No valid fields to update")
    try:
        work_item = await client.update_work_item(work_item_id, operations)
    except AdoApiError as e:
        logger.error("Failed to update work item #%s: %s", work_item_id, e, extra={"work_item_id": work_item_id})
        raise
    return WorkItemUpdateResponse(work_item=work_item, fields_updated=len(operations))


@router.patch("/work-items/{work_item_id}/move", response_model=WorkItemResponse)
async def move_work_item(work_item_id: int, data: WorkItemMove, client: Client):
    """Re-parent and/or re-sprint an item. A null or empty parent detaches it."""
    operations: list[dict] = []
    if "parent" in data.model_fields_set:
        if data.parent is None or data.parent == "":
            relations = await client.get_relations(work_item_id)
            for index, relation in enumerate(relations):
                if relation.get("rel") == PARENT_LINK:
                    operations.append({"op": "remove", "path": f"/relations/{index}"})
                    break
        else:
            try:
                parent_id = int(data.parent)
            except (TypeError, ValueError):
                raise ValidationError("parent must be a work item id", field="parent")
            operations.append({"op": "add", "path": "/fields/System.Parent", "value": parent_id})
    if data.iteration_path:
        operations.append({"op": "add", "path": "/fields/System.IterationPath", "value": data.iteration_path})
    if data.state:
        operations.append({"op": "add", "path": "/fields/System.State", "value": data.state})

    if not operations:
        raise ValidationError("No move operation specified (parent or iterationPath required)")
    work_item = await client.update_work_item(work_item_id, operations)
    logger.info("Moved work item #%s", work_item_id, extra={"work_item_id": work_item_id})
    return WorkItemResponse(work_item=work_item)


@router.get("/wiki/search", response_model=WikiSearchResponse, response_model_exclude_none=True)
async def search_wiki(client: Client, title: Annotated[str | None, Query()] = None):
    if not title:
        raise ValidationError("title query parameter is required", field="title")
    page = await client.find_wiki_page_by_title(title)
    if page is None:
        logger.debug("No wiki page found for %r", title)
        return WikiSearchResponse(found=False)
    return WikiSearchResponse(found=True, wiki=page)


@router.get("/work-items/{work_item_id}", response_model=WorkItemResponse)
async def get_work_item(work_item_id: int, client: Client):
    return WorkItemResponse(work_item=await client.get_work_item(work_item_id))


@router.get("/feature/{work_item_id}", response_model=FeatureDetailsResponse)
async def get_feature_details(work_item_id: int, client: Client, types: WorkItemTypes):
    """Work item plus its wiki page, direct children and progress.

    Wiki and children are optional: if ADO fails on either, the rest is
    still returned.
    """
    work_item = await client.get_work_item(work_item_id)

    wiki = None
    try:
        wiki = await client.find_wiki_page_by_title(work_item.title)
    except AdoApiError as e:
        logger.warning("Wiki search failed for feature #%s: %s", work_item_id, e, extra={"feature_id": work_item_id})

    children: list[WorkItem] = []
    try:
        children = await client.get_child_work_items(work_item_id, types)
    except AdoApiError as e:
        logger.warning("Child items fetch failed for feature #%s: %s", work_item_id, e, extra={"feature_id": work_item_id})

    return FeatureDetailsResponse(
        work_item=work_item,
        wiki=wiki,
        child_items=children,
        progress=shallow_progress(work_item_id, children),
    )
