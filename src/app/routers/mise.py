# src/app/routers/mise.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import ValidationError

from src.app.deps import get_workbench_service
from src.app.domain.errors import InvalidWorkbenchDocError
from src.app.schemas.mise import (
    CapabilitiesResponse,
    CompileRequest,
    ConvertRequest,
    ParseRequest,
    ParseResponse,
    ParseResultOut,
    RecipeEnvelope,
    StacksMigrateRequest,
    StacksMigrateResponse,
    StackToggleRequest,
)
from src.app.services.workbench_service import WorkbenchService
from src.services import capabilities
from src.services.conversion import recipe_from_ai_text
from src.services.errors import AIResponseFormatError
from src.services.lite_compiler import compile_lite_recipe, compile_parse_result
from src.services.parse_freeform import parse_freeform
from src.services.recipe_models import MEDIA_TYPE, Recipe
from src.services.slugify import export_filename
from src.services.stacks import STACK_KEYS, migrate_versioned_stack_keys
from src.services.workbench_doc import create_empty_workbench_doc

router = APIRouter(prefix="/mise", tags=["mise"])
export_router = APIRouter(prefix="/soustack", tags=["soustack"])


def _recipe_from_payload(payload: dict[str, Any]) -> Recipe:
    try:
        return Recipe.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False))


@router.post("/parse", response_model=ParseResponse)
async def parse_text(payload: ParseRequest) -> ParseResponse:
    result = parse_freeform(payload.text)
    recipe = compile_parse_result(result)
    return ParseResponse(
        parse=ParseResultOut(
            title=result.title,
            ingredients=result.ingredients,
            instructions=result.instructions,
            confidence=result.confidence,
            mode=result.mode.value,
        ),
        recipe=recipe.to_artifact(),
    )


@router.post("/compile")
async def compile_recipe(payload: CompileRequest) -> dict[str, Any]:
    meta = payload.meta.model_dump(exclude_none=True) if payload.meta is not None else None
    recipe = compile_lite_recipe(
        name=payload.name,
        description=payload.description,
        ingredients=payload.ingredients,
        instructions=payload.instructions,
        meta=meta,
    )
    return recipe.to_artifact()


@router.post("/convert")
async def convert_ai_output(payload: ConvertRequest) -> dict[str, Any]:
    try:
        recipe = recipe_from_ai_text(payload.responseText, payload.originalText)
    except AIResponseFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return recipe.to_artifact()


@router.get("/stacks", response_model=list[str])
async def list_stacks() -> list[str]:
    return list(STACK_KEYS)


@router.post("/stacks/migrate", response_model=StacksMigrateResponse)
async def migrate_stacks(payload: StacksMigrateRequest) -> StacksMigrateResponse:
    dropped: list[str] = []
    migrated = migrate_versioned_stack_keys(payload.stacks, on_drop=dropped.append)
    return StacksMigrateResponse(
        stacks=dict(migrated),
        changed=migrated is not payload.stacks,
        dropped=dropped,
    )


@router.post("/capabilities", response_model=CapabilitiesResponse)
async def recipe_capabilities(payload: RecipeEnvelope) -> CapabilitiesResponse:
    recipe = _recipe_from_payload(payload.recipe)
    return CapabilitiesResponse(
        capabilities=capabilities.compute_capabilities(recipe),
        suggestTimed=capabilities.should_suggest_timed(recipe),
        autoEnableStorage=capabilities.should_auto_enable_storage(recipe),
        autoEnablePrep=capabilities.should_auto_enable_prep(recipe),
    )


@router.get("/workbench/empty")
async def empty_workbench() -> dict[str, Any]:
    return create_empty_workbench_doc().to_payload()


@router.post("/workbench/load")
async def load_workbench(
    payload: dict[str, Any] = Body(...),
    service: WorkbenchService = Depends(get_workbench_service),
) -> dict[str, Any]:
    try:
        doc = service.load_document(payload)
    except InvalidWorkbenchDocError as exc:
        raise HTTPException(status_code=422, detail=exc.errors)
    return doc.to_payload()


@router.post("/workbench/stacks/{key}")
async def toggle_workbench_stack(
    key: str,
    payload: StackToggleRequest,
    service: WorkbenchService = Depends(get_workbench_service),
) -> dict[str, Any]:
    try:
        doc = service.load_document(payload.document)
    except InvalidWorkbenchDocError as exc:
        raise HTTPException(status_code=422, detail=exc.errors)

    # UnknownStackError is mapped to 400 by the app-level handler
    if payload.enabled:
        doc = service.enable_stack(doc, key)
    else:
        doc = service.disable_stack(doc, key)
    return doc.to_payload()


@export_router.post("/export")
async def export_recipe(payload: RecipeEnvelope) -> Response:
    recipe = _recipe_from_payload(payload.recipe)
    return Response(
        content=recipe.model_dump_json(by_alias=True, exclude_none=True),
        media_type=f"{MEDIA_TYPE}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(recipe)}"'},
    )
