from __future__ import annotations

import os
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .engine.logging.logger import log_evaluation
from .engine.rule_elements import process_rule_elements
from .engine.sheet import CharacterSheet
from .logging_listeners import register_listeners
from .models.api import (
    EvaluateRequest,
    EvaluateResponse,
    ProcessRuleElementsRequest,
    StatisticSpec,
)
from .models.enums import ModifierKind
from .models.modifiers import Modifier
from .models.rule_elements import (
    AdjustModifierRule,
    BaseSpeedRule,
    FlatModifierRule,
    ProcessedRuleElements,
    RuleElementContext,
)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
MAX_MODIFIERS = int(os.getenv("MAX_MODIFIERS", "500"))

app = FastAPI(title="sheetcalc - character statistic engine")
register_listeners()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _build_sheet(req: EvaluateRequest, specs: list[StatisticSpec]) -> CharacterSheet:
    if len(req.modifiers) > MAX_MODIFIERS:
        raise HTTPException(413, f"too many modifiers ({len(req.modifiers)} > {MAX_MODIFIERS})")
    # fresh sheet per request; statistics are never shared across requests
    sheet = CharacterSheet()
    for spec in specs:
        sheet.add_statistic(spec.selector, spec.base_value, name=spec.name)
    sheet.add_modifiers(req.modifiers)
    for source in req.removed_sources:
        sheet.remove_modifiers_by_source(source)
    sheet.set_active_conditions(req.conditions)
    return sheet


def _respond(sheet: CharacterSheet) -> EvaluateResponse:
    breakdowns = sheet.breakdowns()
    for bd in breakdowns.values():
        log_evaluation(bd)
    return EvaluateResponse(statistics=breakdowns, unrouted=sheet.unrouted)


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.get("/info")
def defaults_info():
    """Expose schemas and examples for the request bodies."""
    example_mod = Modifier(
        label="Bless", source="Bless", value=1, kind=ModifierKind.STATUS, selector="attack"
    )
    return {
        "models": {
            "modifier": {
                "schema": Modifier.model_json_schema(),
                "example": example_mod.model_dump(mode="json", by_alias=True),
            },
        },
        "rule_elements": {
            "FlatModifier": {
                "schema": FlatModifierRule.model_json_schema(),
                "example": FlatModifierRule(selector="land-speed", value=5).model_dump(mode="json"),
            },
            "AdjustModifier": {
                "schema": AdjustModifierRule.model_json_schema(),
                "example": AdjustModifierRule(selector="ac", value=1).model_dump(mode="json"),
            },
            "BaseSpeed": {
                "schema": BaseSpeedRule.model_json_schema(),
                "example": BaseSpeedRule(value=25).model_dump(mode="json"),
            },
        },
        "requests": {
            "evaluate": {
                "schema": EvaluateRequest.model_json_schema(),
                "example": EvaluateRequest(
                    statistics=[StatisticSpec(selector="attack", base_value=5)],
                    modifiers=[example_mod],
                ).model_dump(mode="json", by_alias=True),
            },
            "process_rule_elements": {
                "schema": ProcessRuleElementsRequest.model_json_schema(),
            },
        },
        "limits": {"max_modifiers": MAX_MODIFIERS},
    }


@app.post("/statistics/evaluate", response_model=EvaluateResponse)
def evaluate_statistics(req: EvaluateRequest):
    return _respond(_build_sheet(req, req.statistics))


@app.post("/statistics/{selector}/evaluate", response_model=EvaluateResponse)
def evaluate_statistic(selector: str, req: EvaluateRequest):
    specs = [s for s in req.statistics if s.selector == selector]
    if not specs:
        raise HTTPException(404, f"statistic not found: {selector}")
    return _respond(_build_sheet(req, specs))


@app.post("/rule-elements/process", response_model=ProcessedRuleElements)
def process_rules(req: ProcessRuleElementsRequest):
    ctx = RuleElementContext(source=req.source, level=req.level, abilities=req.abilities)
    return process_rule_elements(req.rules, ctx)
