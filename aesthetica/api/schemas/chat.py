"""Pydantic v2 schemas for the Chat API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileSchema(BaseModel):
    """Optional profile collected by the client; camelCase or snake_case keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    age_range: Optional[str] = Field(default=None, alias="ageRange")
    country: Optional[str] = None
    area: Optional[str] = None
    interests: List[str] = []
    previous_procedures: List[str] = Field(default_factory=list, alias="previousProcedures")
    is_pregnant: Optional[bool] = Field(default=None, alias="isPregnant")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(default=None, max_length=8000)
    mode: Optional[str] = Field(default=None, max_length=32)
    profile: Optional[ProfileSchema] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId", max_length=128)


class ChatResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


class SessionCounts(BaseModel):
    totalMessages: int = 0
    loggedEvents: int = 0
    triageEvents: int = 0
    materialEvents: int = 0
    urgentEvents: int = 0
    brainCalls: int = 0
    deterministicResponses: int = 0
    definitionResponses: int = 0


class SessionResponse(BaseModel):
    """Stored telemetry for one session (camelCase, as persisted)."""

    sessionId: str
    createdAt: Optional[datetime] = None
    lastActiveAt: Optional[datetime] = None
    mode: Optional[str] = None
    profileSnapshot: Optional[Dict[str, Any]] = None
    domainHint: str
    lastRoute: Optional[str] = None
    lastRouteReason: Optional[str] = None
    counts: SessionCounts
    highestSeveritySeen: int = 0
    seenComplicationIds: List[str] = []
    seenMaterialIds: List[str] = []
    seenDangerKeys: List[str] = []
    urgentSignalsSeen: List[str] = []
    lastLoggedAtMs: Optional[float] = None
    lastLoggedEventKey: Optional[str] = None
    lastImportantAt: Optional[datetime] = None
    lastImportantSummary: Optional[str] = None
    lastUserPreview: Optional[str] = None
    lastBotPreview: Optional[str] = None
